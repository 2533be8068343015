"""Orchestration of the Load → Split → Fit → Evaluate → Predict workflow."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from dataclasses import dataclass

from loguru import logger

from wqkit.context import RunContext
from wqkit.dataset import load_dataset, train_test_split
from wqkit.evaluation import assess_accuracy, evaluate_model
from wqkit.exceptions import WaterQualityError
from wqkit.logging import STAGE_LEVEL
from wqkit.models import Advisory, BinaryClassificationMetrics, WorkflowStage
from wqkit.prediction import predict_potability, predict_probability
from wqkit.settings import WaterQualitySettings
from wqkit.training import PotabilityModel, train_model


@dataclass(frozen=True)
class WorkflowResult:
    """Everything produced by one workflow run.

    Attributes:
        model (PotabilityModel): The fitted model.
        train_count (int): Number of training samples.
        test_count (int): Number of test samples.
        metrics (BinaryClassificationMetrics): Test-set metrics.
        advisory (Advisory): Accuracy-based advisory message.
        prediction (bool): Predicted potability of the configured sample.
        probability (float): Positive-class probability of the configured sample.
    """

    model: PotabilityModel
    train_count: int
    test_count: int
    metrics: BinaryClassificationMetrics
    advisory: Advisory
    prediction: bool
    probability: float


def run_workflow(settings: WaterQualitySettings) -> WorkflowResult:
    """Run every stage in order, aborting on the first failure.

    Args:
        settings (WaterQualitySettings): Configuration for the run.

    Returns:
        WorkflowResult: The fitted model, metrics, and sample prediction.

    Raises:
        WaterQualityError: From the first stage that fails; its `stage`
            attribute names that stage.
    """
    context = RunContext(seed=settings.seed)

    with _stage(WorkflowStage.LOAD):
        dataset = load_dataset(settings.data_path, separator=settings.separator, has_header=settings.has_header)

    with _stage(WorkflowStage.SPLIT):
        split = train_test_split(dataset, test_fraction=settings.test_fraction, context=context)

    with _stage(WorkflowStage.FIT):
        model = train_model(split.train, hyperparameters=settings.hyperparameters, context=context)

    with _stage(WorkflowStage.EVALUATE):
        metrics = evaluate_model(model, split.test)
        advisory = assess_accuracy(metrics, settings.accuracy_threshold)

    with _stage(WorkflowStage.PREDICT):
        prediction = predict_potability(model, settings.sample)
        probability = predict_probability(model, settings.sample)

    return WorkflowResult(
        model=model,
        train_count=split.train.height,
        test_count=split.test.height,
        metrics=metrics,
        advisory=advisory,
        prediction=prediction,
        probability=probability,
    )


@contextlib.contextmanager
def _stage(stage: WorkflowStage) -> Iterator[None]:
    """Log a stage boundary and tag escaping wqkit errors with the stage.

    Args:
        stage (WorkflowStage): The stage being run.

    Yields:
        None: Control to the stage body.
    """
    logger.log(STAGE_LEVEL, "Stage started", stage=stage.value)
    try:
        yield
    except WaterQualityError as exc:
        if exc.stage is None:
            exc.stage = stage
        logger.error("Stage failed", stage=stage.value, error=repr(exc))
        raise
    logger.log(STAGE_LEVEL, "Stage finished", stage=stage.value)
