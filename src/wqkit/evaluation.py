"""Scoring a fitted model against the held-out test subset."""

from __future__ import annotations

from typing import Final

import numpy as np
import polars as pl
from loguru import logger
from sklearn.metrics import (
    accuracy_score,
    average_precision_score,
    confusion_matrix,
    f1_score,
    log_loss,
    precision_score,
    recall_score,
    roc_auc_score,
)

from wqkit.exceptions import InvalidArgumentError
from wqkit.logging import STAGE_LEVEL
from wqkit.models import LABEL_COLUMN, Advisory, BinaryClassificationMetrics, ConfusionMatrix
from wqkit.training import PotabilityModel

DEFAULT_ACCURACY_THRESHOLD: Final[float] = 0.70


def evaluate_model(model: PotabilityModel, test: pl.DataFrame) -> BinaryClassificationMetrics:
    """Compute binary classification metrics of `model` on labelled rows.

    The test rows are scaled with the model's training-time parameters.
    Neither the model nor the rows are modified.

    Args:
        model (PotabilityModel): The fitted model.
        test (pl.DataFrame): Labelled held-out rows.

    Returns:
        BinaryClassificationMetrics: Accuracy, AUC, F1 and the supporting
            per-class metrics. AUC and AUPRC are `None` when `test` holds a
            single label class.

    Raises:
        InvalidArgumentError: If `test` is empty.
    """
    if test.height == 0:
        raise InvalidArgumentError("Cannot evaluate on an empty test set", argument="test")

    actual = test[LABEL_COLUMN].cast(pl.Int8).to_numpy()
    probabilities = model.predict_probability(test)
    predicted = model.predict(test).astype(np.int8)

    tn, fp, fn, tp = confusion_matrix(actual, predicted, labels=[0, 1]).ravel()
    single_class = np.unique(actual).size < 2  # noqa: PLR2004 - binary classification
    if single_class:
        logger.warning("Test set holds a single label class; ranking metrics are undefined", samples=test.height)

    metrics = BinaryClassificationMetrics(
        accuracy=float(accuracy_score(actual, predicted)),
        area_under_roc_curve=None if single_class else float(roc_auc_score(actual, probabilities)),
        f1_score=float(f1_score(actual, predicted, zero_division=0)),
        positive_precision=float(precision_score(actual, predicted, zero_division=0)),
        positive_recall=float(recall_score(actual, predicted, zero_division=0)),
        negative_precision=float(precision_score(actual, predicted, pos_label=0, zero_division=0)),
        negative_recall=float(recall_score(actual, predicted, pos_label=0, zero_division=0)),
        log_loss=float(log_loss(actual, probabilities, labels=[0, 1])),
        area_under_precision_recall_curve=None
        if single_class
        else float(average_precision_score(actual, probabilities)),
        confusion_matrix=ConfusionMatrix(
            true_positives=int(tp),
            false_positives=int(fp),
            true_negatives=int(tn),
            false_negatives=int(fn),
        ),
    )
    logger.log(STAGE_LEVEL, "Model evaluated", samples=test.height, accuracy=metrics.accuracy)
    logger.debug("Evaluation metrics", **metrics.model_dump(exclude={"confusion_matrix"}))
    return metrics


def assess_accuracy(
    metrics: BinaryClassificationMetrics,
    threshold: float = DEFAULT_ACCURACY_THRESHOLD,
) -> Advisory:
    """Map test accuracy to one of the two fixed advisory messages.

    Args:
        metrics (BinaryClassificationMetrics): Evaluation result.
        threshold (float): Minimum accuracy regarded as acceptable. Defaults to 0.70.

    Returns:
        Advisory: `Advisory.ACCEPTABLE` when accuracy reaches `threshold`,
            otherwise `Advisory.NEEDS_IMPROVEMENT`.

    Raises:
        InvalidArgumentError: If `threshold` is outside [0, 1].
    """
    if not 0.0 <= threshold <= 1.0:
        raise InvalidArgumentError(f"threshold must be in [0, 1], got {threshold}", argument="threshold")
    return Advisory.ACCEPTABLE if metrics.accuracy >= threshold else Advisory.NEEDS_IMPROVEMENT
