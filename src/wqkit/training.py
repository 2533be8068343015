"""Fitting the feature pipeline and the gradient-boosted tree ensemble."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import polars as pl
from loguru import logger
from sklearn.ensemble import HistGradientBoostingClassifier

from wqkit.context import RunContext
from wqkit.exceptions import TrainingError
from wqkit.features import FeaturePipeline, FittedFeaturePipeline, build_feature_pipeline
from wqkit.logging import STAGE_LEVEL
from wqkit.models import LABEL_COLUMN, TrainerHyperparameters

_POSITIVE_CLASS_INDEX: int = 1  # Labels are encoded 0/1, so column 1 of predict_proba is "potable".


@dataclass(frozen=True)
class PotabilityModel:
    """A fitted feature pipeline together with the fitted tree ensemble.

    The model is read-only after training: evaluation and prediction reuse
    the training-time scaling parameters and never refit anything.

    Attributes:
        features (FittedFeaturePipeline): Pipeline fitted on the training subset.
        estimator (HistGradientBoostingClassifier): The fitted ensemble.
        hyperparameters (TrainerHyperparameters): Hyperparameters used for fitting.
        training_sample_count (int): Number of rows the model was fitted on.
    """

    features: FittedFeaturePipeline
    estimator: HistGradientBoostingClassifier
    hyperparameters: TrainerHyperparameters
    training_sample_count: int

    def predict_probability(self, data: pl.DataFrame) -> np.ndarray:
        """Return the probability that each row is potable.

        Args:
            data (pl.DataFrame): Rows containing the measurement columns.

        Returns:
            np.ndarray: 1-D float64 array of positive-class probabilities.
        """
        feature_matrix = self.features.transform(data)
        return self.estimator.predict_proba(feature_matrix)[:, _POSITIVE_CLASS_INDEX].astype(np.float64)

    def predict(self, data: pl.DataFrame) -> np.ndarray:
        """Return the predicted potability of each row.

        Args:
            data (pl.DataFrame): Rows containing the measurement columns.

        Returns:
            np.ndarray: 1-D boolean array of predictions.
        """
        feature_matrix = self.features.transform(data)
        return self.estimator.predict(feature_matrix) == _POSITIVE_CLASS_INDEX


def train_model(
    train: pl.DataFrame,
    *,
    hyperparameters: TrainerHyperparameters | None = None,
    context: RunContext | None = None,
    pipeline: FeaturePipeline | None = None,
) -> PotabilityModel:
    """Fit the feature pipeline and a gradient-boosted tree classifier.

    Args:
        train (pl.DataFrame): Labelled training rows.
        hyperparameters (TrainerHyperparameters | None): Ensemble settings.
            Defaults to `TrainerHyperparameters()`.
        context (RunContext | None): Supplies the estimator's random seed.
        pipeline (FeaturePipeline | None): Feature pipeline to fit. Defaults
            to `build_feature_pipeline()`.

    Returns:
        PotabilityModel: The fitted model.

    Raises:
        TrainingError: If the training set is empty or holds a single label class.
    """
    hyperparameters = hyperparameters or TrainerHyperparameters()
    context = context or RunContext()
    pipeline = pipeline or build_feature_pipeline()

    class_counts = _count_classes(train)
    if train.height == 0:
        raise TrainingError("Training set is empty", class_counts=class_counts)
    if len(class_counts) < 2:  # noqa: PLR2004 - binary classification
        raise TrainingError(
            f"Training set contains a single label class: {class_counts}",
            class_counts=class_counts,
        )

    logger.log(STAGE_LEVEL, "Training started", samples=train.height, **hyperparameters.model_dump())
    fitted_features = pipeline.fit(train)
    feature_matrix = fitted_features.transform(train)
    target_array = train[LABEL_COLUMN].cast(pl.Int8).to_numpy()

    estimator = HistGradientBoostingClassifier(
        learning_rate=hyperparameters.learning_rate,
        max_iter=hyperparameters.number_of_trees,
        max_leaf_nodes=hyperparameters.number_of_leaves,
        min_samples_leaf=hyperparameters.minimum_example_count_per_leaf,
        early_stopping=False,
        random_state=context.seed,
    )
    estimator.fit(feature_matrix, target_array)
    logger.log(STAGE_LEVEL, "Training finished", trees=estimator.n_iter_)

    return PotabilityModel(
        features=fitted_features,
        estimator=estimator,
        hyperparameters=hyperparameters,
        training_sample_count=train.height,
    )


def _count_classes(train: pl.DataFrame) -> dict[bool, int]:
    """Count training rows per label value, omitting absent labels.

    Args:
        train (pl.DataFrame): Labelled training rows.

    Returns:
        dict[bool, int]: Mapping of label to row count.
    """
    positives = int(train[LABEL_COLUMN].sum()) if train.height else 0
    counts = {True: positives, False: train.height - positives}
    return {label: count for label, count in counts.items() if count > 0}
