"""Feature pipeline: stage protocol, column concatenation, and min-max scaling.

A pipeline is fit exactly once, on the training subset. Fitting returns a
`FittedFeaturePipeline` that holds the frozen parameters of every stage and
only transforms; evaluation and prediction data are scaled with the training
statistics and never refit.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np
import polars as pl
from loguru import logger

from wqkit.exceptions import InvalidArgumentError
from wqkit.models import MEASUREMENT_COLUMNS

# ---------------------------------------------------------------------------
# Stage protocol
# ---------------------------------------------------------------------------


class FeatureStage(Protocol):
    """One step of a feature pipeline.

    `fit` learns parameters from training data; `apply` transforms any data
    with previously learned parameters and must not learn anything new.
    """

    def fit(self, data: Any) -> Any:
        """Learn stage parameters from training data."""
        ...

    def apply(self, params: Any, data: Any) -> Any:
        """Transform data with previously learned parameters."""
        ...


# ---------------------------------------------------------------------------
# Concatenation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConcatenateStage:
    """Stack named numeric columns, in declared order, into one feature matrix.

    Attributes:
        columns (tuple[str, ...]): Source column names in feature order.
    """

    columns: tuple[str, ...] = MEASUREMENT_COLUMNS

    def fit(self, data: pl.DataFrame) -> tuple[str, ...]:
        """Check that every source column exists and return the column order.

        Args:
            data (pl.DataFrame): Training rows.

        Returns:
            tuple[str, ...]: The column order used by `apply`.

        Raises:
            InvalidArgumentError: If a source column is missing.
        """
        _require_columns(data, self.columns)
        return self.columns

    def apply(self, params: tuple[str, ...], data: pl.DataFrame) -> np.ndarray:
        """Build the `(n_rows, n_columns)` float64 feature matrix.

        Args:
            params (tuple[str, ...]): Column order returned by `fit`.
            data (pl.DataFrame): Rows to convert.

        Returns:
            np.ndarray: Feature matrix; missing values are `NaN`.

        Raises:
            InvalidArgumentError: If a source column is missing.
        """
        _require_columns(data, params)
        if data.height == 0:
            return np.empty((0, len(params)), dtype=np.float64)
        return data.select([pl.col(column).cast(pl.Float64) for column in params]).to_numpy().astype(np.float64)


# ---------------------------------------------------------------------------
# Min-max scaling
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MinMaxParams:
    """Per-position minimum and maximum observed on the training matrix.

    Both arrays are read-only.

    Attributes:
        minimums (np.ndarray): Column-wise minimum, ignoring `NaN`.
        maximums (np.ndarray): Column-wise maximum, ignoring `NaN`.
    """

    minimums: np.ndarray
    maximums: np.ndarray

    @property
    def degenerate(self) -> np.ndarray:
        """Boolean mask of positions whose training range is empty."""
        return ~(self.maximums > self.minimums)


@dataclass(frozen=True)
class MinMaxScaleStage:
    """Rescale every feature position to [0, 1] with training-set min/max.

    Values outside the training range are clamped to the nearest bound. A
    position whose training minimum equals its maximum maps to 0. Missing
    values stay `NaN`.

    Examples:
        >>> stage = MinMaxScaleStage()
        >>> params = stage.fit(np.array([[0.0, 5.0], [10.0, 5.0]]))
        >>> stage.apply(params, np.array([[5.0, 7.0], [20.0, 5.0]])).tolist()
        [[0.5, 0.0], [1.0, 0.0]]
    """

    def fit(self, data: np.ndarray) -> MinMaxParams:
        """Compute per-position min and max over the training matrix.

        Args:
            data (np.ndarray): 2-D training feature matrix.

        Returns:
            MinMaxParams: Read-only scaling parameters.

        Raises:
            InvalidArgumentError: If the matrix has no rows.
        """
        if data.ndim != 2 or data.shape[0] == 0:
            raise InvalidArgumentError("Cannot fit min-max scaling on an empty matrix", argument="data")
        # fmin/fmax skip NaN; an all-NaN column stays NaN and is treated as degenerate.
        minimums = np.fmin.reduce(data, axis=0)
        maximums = np.fmax.reduce(data, axis=0)
        minimums.setflags(write=False)
        maximums.setflags(write=False)
        params = MinMaxParams(minimums=minimums, maximums=maximums)
        logger.debug(
            "Min-max scaling fitted",
            rows=data.shape[0],
            degenerate_positions=np.flatnonzero(params.degenerate).tolist(),
        )
        return params

    def apply(self, params: MinMaxParams, data: np.ndarray) -> np.ndarray:
        """Scale a feature matrix with previously fitted parameters.

        Args:
            params (MinMaxParams): Parameters returned by `fit`.
            data (np.ndarray): 2-D feature matrix with the fitted width.

        Returns:
            np.ndarray: A new matrix with every non-missing value in [0, 1].

        Raises:
            InvalidArgumentError: If the matrix width differs from the fitted width.
        """
        if data.ndim != 2 or data.shape[1] != params.minimums.shape[0]:
            raise InvalidArgumentError(
                f"Expected a matrix with {params.minimums.shape[0]} columns, got shape {data.shape}",
                argument="data",
            )
        degenerate = params.degenerate
        ranges = np.where(degenerate, 1.0, params.maximums - params.minimums)
        offsets = np.where(degenerate, 0.0, params.minimums)
        with np.errstate(invalid="ignore"):
            scaled = np.clip((data - offsets) / ranges, 0.0, 1.0)
        scaled[:, degenerate] = np.where(np.isnan(data[:, degenerate]), np.nan, 0.0)
        return scaled


# ---------------------------------------------------------------------------
# Pipeline composition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FittedFeaturePipeline:
    """A feature pipeline whose stage parameters are fixed.

    Attributes:
        stages (tuple[FeatureStage, ...]): The stages, in application order.
        params (tuple[Any, ...]): Parameters learned by each stage, parallel
            to `stages`.
    """

    stages: tuple[FeatureStage, ...]
    params: tuple[Any, ...]

    def transform(self, data: pl.DataFrame) -> np.ndarray:
        """Run rows through every stage with the fitted parameters.

        Args:
            data (pl.DataFrame): Rows containing the source columns.

        Returns:
            np.ndarray: The scaled `(n_rows, n_features)` feature matrix.
        """
        current: Any = data
        for stage, stage_params in zip(self.stages, self.params, strict=True):
            current = stage.apply(stage_params, current)
        return current


@dataclass(frozen=True)
class FeaturePipeline:
    """An ordered sequence of unfitted feature stages.

    Attributes:
        stages (tuple[FeatureStage, ...]): The stages, in application order.
    """

    stages: tuple[FeatureStage, ...]

    def fit(self, data: pl.DataFrame) -> FittedFeaturePipeline:
        """Fit each stage on the output of the previous one.

        Args:
            data (pl.DataFrame): Training rows.

        Returns:
            FittedFeaturePipeline: The pipeline with frozen parameters.
        """
        current: Any = data
        learned: list[Any] = []
        for stage in self.stages:
            stage_params = stage.fit(current)
            learned.append(stage_params)
            current = stage.apply(stage_params, current)
        return FittedFeaturePipeline(stages=self.stages, params=tuple(learned))


def build_feature_pipeline(columns: Sequence[str] = MEASUREMENT_COLUMNS) -> FeaturePipeline:
    """Build the standard pipeline: concatenate `columns`, then min-max scale.

    Args:
        columns (Sequence[str]): Source columns in feature order. Defaults to
            the nine water measurements.

    Returns:
        FeaturePipeline: The unfitted pipeline.
    """
    return FeaturePipeline(stages=(ConcatenateStage(columns=tuple(columns)), MinMaxScaleStage()))


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _require_columns(data: pl.DataFrame, columns: Sequence[str]) -> None:
    """Raise `InvalidArgumentError` if any of `columns` is absent from `data`.

    Args:
        data (pl.DataFrame): Rows to check.
        columns (Sequence[str]): Required column names.

    Raises:
        InvalidArgumentError: Naming the first missing column.
    """
    missing = [column for column in columns if column not in data.columns]
    if missing:
        raise InvalidArgumentError(f"Required feature columns are missing: {missing}", argument=missing[0])
