"""Tests for single-sample prediction."""

from __future__ import annotations

import math
from typing import Any

import numpy as np
import polars as pl
import pytest
from pytest_check import check

from wqkit.context import RunContext
from wqkit.dataset import WATER_SAMPLE_SCHEMA
from wqkit.exceptions import InvalidArgumentError
from wqkit.models import DEFAULT_SAMPLE, LABEL_COLUMN, MEASUREMENT_COLUMNS, TrainerHyperparameters, WaterMeasurements
from wqkit.prediction import predict_potability, predict_probability, validate_measurements
from wqkit.training import PotabilityModel, train_model


@pytest.fixture(scope="module")
def model() -> PotabilityModel:
    """Train a model that calls neutral pH potable and acidic pH non-potable.

    Returns:
        PotabilityModel: The fitted model.
    """
    ph_values = [6.8, 6.9, 7.0, 7.1, 7.2, 7.3, 2.0, 2.4, 2.8, 3.2, 3.6, 4.0]
    data: dict[str, list[Any]] = {column: [100.0] * len(ph_values) for column in MEASUREMENT_COLUMNS}
    data["pH"] = ph_values
    data[LABEL_COLUMN] = [True] * 6 + [False] * 6
    dataset = pl.DataFrame(data, schema=dict(WATER_SAMPLE_SCHEMA))
    hyperparameters = TrainerHyperparameters(number_of_leaves=4, minimum_example_count_per_leaf=1, number_of_trees=20)
    return train_model(dataset, hyperparameters=hyperparameters, context=RunContext(seed=0))


def _sample(**overrides: float) -> dict[str, float]:
    """Return the default sample keyed by column name, with overrides.

    Args:
        **overrides (float): Values keyed by column name.

    Returns:
        dict[str, float]: The sample mapping.
    """
    return {**DEFAULT_SAMPLE.to_row(), **overrides}


class TestPredictPotability:
    """Tests for `predict_potability`."""

    def test_predicts_each_class(self, model: PotabilityModel) -> None:
        """Neutral water is predicted potable and acidic water is not.

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        with check:
            assert predict_potability(model, _sample(pH=7.0)) is True
        with check:
            assert predict_potability(model, _sample(pH=2.5)) is False

    def test_is_idempotent(self, model: PotabilityModel) -> None:
        """Repeating a prediction with the same model and sample gives the same answer.

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        sample = _sample(pH=6.95)

        results = {predict_potability(model, sample) for _ in range(5)}

        assert len(results) == 1

    def test_accepts_record_or_field_names(self, model: PotabilityModel) -> None:
        """A `WaterMeasurements`, a column-keyed mapping, and a field-keyed mapping agree.

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        by_column = _sample(pH=2.2)
        by_field = WaterMeasurements.model_validate(by_column).model_dump()
        record = WaterMeasurements.model_validate(by_column)

        predictions = {
            predict_potability(model, by_column),
            predict_potability(model, by_field),
            predict_potability(model, record),
        }

        assert predictions == {False}

    def test_missing_measurement_raises_and_model_is_unchanged(self, model: PotabilityModel) -> None:
        """A sample without Sulfate is rejected and later predictions still work.

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        # Arrange
        sample = _sample()
        del sample["Sulfate"]
        probe = _sample(pH=7.1)
        before = predict_probability(model, probe)

        # Act
        with pytest.raises(InvalidArgumentError) as exc_info:
            predict_potability(model, sample)

        # Assert
        with check:
            assert exc_info.value.argument == "Sulfate"
        with check:
            assert predict_probability(model, probe) == before

    def test_non_numeric_measurement_raises(self, model: PotabilityModel) -> None:
        """A measurement that is not a number is rejected, naming the field.

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        with pytest.raises(InvalidArgumentError) as exc_info:
            predict_potability(model, {**_sample(), "Turbidity": "cloudy"})

        assert exc_info.value.argument == "Turbidity"

    def test_missing_value_as_nan_is_accepted(self, model: PotabilityModel) -> None:
        """An explicit NaN measurement is treated as a missing value, not an error.

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        result = predict_potability(model, _sample(Sulfate=math.nan))

        assert isinstance(result, bool)

    def test_values_outside_training_range_are_clamped(self, model: PotabilityModel) -> None:
        """Extreme inputs are scaled to the ends of the training range.

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        with check:
            assert predict_probability(model, _sample(pH=-50.0)) == predict_probability(model, _sample(pH=2.0))
        with check:
            assert predict_probability(model, _sample(pH=99.0)) == predict_probability(model, _sample(pH=7.3))


class TestPredictProbability:
    """Tests for `predict_probability`."""

    def test_lies_in_unit_interval(self, model: PotabilityModel) -> None:
        """The probability is a float in [0, 1].

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        probabilities = [predict_probability(model, _sample(pH=ph)) for ph in np.linspace(0.0, 14.0, 8)]

        with check:
            assert all(isinstance(p, float) for p in probabilities)
        with check:
            assert all(0.0 <= p <= 1.0 for p in probabilities)

    def test_agrees_with_label(self, model: PotabilityModel) -> None:
        """The label is potable exactly when the probability favours it.

        Args:
            model (PotabilityModel): Fitted model fixture.
        """
        for ph in (2.0, 7.0):
            sample = _sample(pH=ph)
            with check:
                assert predict_potability(model, sample) == (predict_probability(model, sample) > 0.5)


class TestValidateMeasurements:
    """Tests for `validate_measurements`."""

    def test_record_is_returned_unchanged(self) -> None:
        """A `WaterMeasurements` passes through as-is."""
        assert validate_measurements(DEFAULT_SAMPLE) is DEFAULT_SAMPLE

    def test_numeric_strings_are_coerced(self) -> None:
        """Numeric text converts to floats."""
        record = validate_measurements({**_sample(), "pH": "6.5"})

        assert record.ph == pytest.approx(6.5)
