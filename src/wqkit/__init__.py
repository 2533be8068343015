"""wqkit: Train, evaluate, and query a water potability classifier."""

from loguru import logger

from wqkit.context import RunContext
from wqkit.dataset import DatasetSplit, load_dataset, train_test_split
from wqkit.evaluation import assess_accuracy, evaluate_model
from wqkit.logging import PACKAGE_NAME, enable_logging
from wqkit.models import (
    Advisory,
    BinaryClassificationMetrics,
    TrainerHyperparameters,
    WaterMeasurements,
    WaterSample,
)
from wqkit.prediction import predict_potability, predict_probability
from wqkit.settings import WaterQualitySettings
from wqkit.training import PotabilityModel, train_model
from wqkit.workflow import WorkflowResult, run_workflow

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the wqkit module by default

__all__ = [
    "Advisory",
    "BinaryClassificationMetrics",
    "DatasetSplit",
    "PotabilityModel",
    "RunContext",
    "TrainerHyperparameters",
    "WaterMeasurements",
    "WaterQualitySettings",
    "WaterSample",
    "WorkflowResult",
    "assess_accuracy",
    "enable_logging",
    "evaluate_model",
    "load_dataset",
    "predict_potability",
    "predict_probability",
    "run_workflow",
    "train_model",
    "train_test_split",
]
