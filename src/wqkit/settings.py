"""Externalized configuration for a workflow run."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wqkit.models import DEFAULT_SAMPLE, TrainerHyperparameters, WaterMeasurements


class WaterQualitySettings(BaseSettings):
    """Settings for one train-evaluate-predict run.

    Values come from keyword arguments, then `WQKIT_*` environment variables,
    then a `.env` file. Nested models use `__` as the delimiter, e.g.
    `WQKIT_HYPERPARAMETERS__LEARNING_RATE=0.1`.

    Attributes:
        data_path (Path): The delimited dataset file.
        separator (str): Field separator of the dataset file.
        has_header (bool): Whether the dataset file starts with a header row.
        test_fraction (float): Fraction of samples held out for evaluation.
        seed (int | None): Random seed for splitting and training.
        accuracy_threshold (float): Minimum accuracy regarded as acceptable.
        hyperparameters (TrainerHyperparameters): Tree ensemble settings.
        sample (WaterMeasurements): The sample to predict after evaluation.
    """

    model_config = SettingsConfigDict(
        env_prefix="WQKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    data_path: Path = Field(description="The delimited dataset file.")
    separator: str = Field(default=",", min_length=1, max_length=1, description="Field separator.")
    has_header: bool = Field(default=True, description="Whether the file starts with a header row.")
    test_fraction: float = Field(default=0.2, gt=0.0, lt=1.0, description="Fraction held out for evaluation.")
    seed: int | None = Field(default=None, description="Random seed; None means non-deterministic.")
    accuracy_threshold: float = Field(default=0.70, ge=0.0, le=1.0, description="Minimum acceptable accuracy.")
    hyperparameters: TrainerHyperparameters = Field(default_factory=TrainerHyperparameters)
    sample: WaterMeasurements = Field(default=DEFAULT_SAMPLE, description="The sample to predict.")
