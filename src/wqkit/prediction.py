"""Single-sample prediction with a fitted model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import polars as pl
from loguru import logger
from pydantic import ValidationError

from wqkit.exceptions import InvalidArgumentError
from wqkit.logging import STAGE_LEVEL
from wqkit.models import WaterMeasurements
from wqkit.training import PotabilityModel


def predict_potability(model: PotabilityModel, sample: WaterMeasurements | Mapping[str, Any]) -> bool:
    """Predict whether one unlabelled sample is potable.

    The sample is scaled with the model's training-time parameters. Calling
    this repeatedly with the same model and sample gives the same answer.

    Args:
        model (PotabilityModel): The fitted model.
        sample (WaterMeasurements | Mapping[str, Any]): The nine measurements,
            either as a model or keyed by column name (`"pH"`, `"Sulfate"`, ...)
            or field name (`"ph"`, `"sulfate"`, ...).

    Returns:
        bool: `True` when the sample is predicted potable.

    Raises:
        InvalidArgumentError: If a measurement is absent or non-numeric.
    """
    frame = _to_frame(sample)
    prediction = bool(model.predict(frame)[0])
    logger.log(STAGE_LEVEL, "Sample predicted", potability=prediction)
    return prediction


def predict_probability(model: PotabilityModel, sample: WaterMeasurements | Mapping[str, Any]) -> float:
    """Return the probability that one unlabelled sample is potable.

    Args:
        model (PotabilityModel): The fitted model.
        sample (WaterMeasurements | Mapping[str, Any]): The nine measurements.

    Returns:
        float: Positive-class probability in [0, 1].

    Raises:
        InvalidArgumentError: If a measurement is absent or non-numeric.
    """
    return float(model.predict_probability(_to_frame(sample))[0])


def validate_measurements(sample: WaterMeasurements | Mapping[str, Any]) -> WaterMeasurements:
    """Coerce prediction input into a `WaterMeasurements` record.

    Args:
        sample (WaterMeasurements | Mapping[str, Any]): Candidate input.

    Returns:
        WaterMeasurements: The validated record.

    Raises:
        InvalidArgumentError: Naming the first absent or non-numeric field.
    """
    if isinstance(sample, WaterMeasurements):
        return sample
    try:
        return WaterMeasurements.model_validate(dict(sample))
    except ValidationError as exc:
        first_error = exc.errors()[0]
        field_name = str(first_error["loc"][0]) if first_error["loc"] else "sample"
        raise InvalidArgumentError(
            f"Invalid prediction input for '{field_name}': {first_error['msg']}",
            argument=field_name,
        ) from exc


def _to_frame(sample: WaterMeasurements | Mapping[str, Any]) -> pl.DataFrame:
    """Validate a sample and convert it to a one-row DataFrame of measurement columns.

    Args:
        sample (WaterMeasurements | Mapping[str, Any]): Candidate input.

    Returns:
        pl.DataFrame: One row keyed by dataset column name.
    """
    row = validate_measurements(sample).to_row()
    return pl.DataFrame({column: [value] for column, value in row.items()}, schema=dict.fromkeys(row, pl.Float64))
