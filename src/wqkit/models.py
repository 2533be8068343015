"""Pydantic models for water samples, trainer hyperparameters, and evaluation metrics."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Final

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Column layout
# ---------------------------------------------------------------------------

MEASUREMENT_COLUMNS: Final[tuple[str, ...]] = (
    "pH",
    "Hardness",
    "Solids",
    "Chloramines",
    "Sulfate",
    "Conductivity",
    "Organic_carbon",
    "Trihalomethanes",
    "Turbidity",
)
LABEL_COLUMN: Final[str] = "Potability"
SAMPLE_COLUMNS: Final[tuple[str, ...]] = (*MEASUREMENT_COLUMNS, LABEL_COLUMN)

UnitInterval = Annotated[float, Field(ge=0.0, le=1.0)]


class WorkflowStage(StrEnum):
    """Stages of the train-and-evaluate workflow, in execution order."""

    LOAD = "load"
    SPLIT = "split"
    FIT = "fit"
    EVALUATE = "evaluate"
    PREDICT = "predict"


class Advisory(StrEnum):
    """Fixed advisory messages derived from test-set accuracy."""

    ACCEPTABLE = "The model performs well and can be used for prediction on this type of data."
    NEEDS_IMPROVEMENT = "The model may not be accurate enough for reliable predictions. Consider improving the model."


# ---------------------------------------------------------------------------
# Samples
# ---------------------------------------------------------------------------


class WaterMeasurements(BaseModel):
    """The nine continuous measurements of one water sample.

    Fields use snake_case names in Python and the dataset's column names as
    aliases, so a record can be built from either form and dumped back with
    `model_dump(by_alias=True)` in column order.

    Attributes:
        ph (float): pH level of the water.
        hardness (float): Water hardness (mg/L).
        solids (float): Total dissolved solids (ppm).
        chloramines (float): Chloramines concentration (ppm).
        sulfate (float): Sulfate concentration (mg/L).
        conductivity (float): Electrical conductivity (μS/cm).
        organic_carbon (float): Total organic carbon (ppm).
        trihalomethanes (float): Trihalomethanes concentration (μg/L).
        turbidity (float): Turbidity (NTU).

    Examples:
        >>> sample = WaterMeasurements.model_validate({
        ...     "pH": 7.0, "Hardness": 200.0, "Solids": 15000.0, "Chloramines": 8.0,
        ...     "Sulfate": 350.0, "Conductivity": 400.0, "Organic_carbon": 10.0,
        ...     "Trihalomethanes": 3.0, "Turbidity": 2.0,
        ... })
        >>> sample.ph
        7.0
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ph: float = Field(alias="pH", description="pH level of the water.")
    hardness: float = Field(alias="Hardness", description="Water hardness (mg/L).")
    solids: float = Field(alias="Solids", description="Total dissolved solids (ppm).")
    chloramines: float = Field(alias="Chloramines", description="Chloramines concentration (ppm).")
    sulfate: float = Field(alias="Sulfate", description="Sulfate concentration (mg/L).")
    conductivity: float = Field(alias="Conductivity", description="Electrical conductivity (μS/cm).")
    organic_carbon: float = Field(alias="Organic_carbon", description="Total organic carbon (ppm).")
    trihalomethanes: float = Field(alias="Trihalomethanes", description="Trihalomethanes concentration (μg/L).")
    turbidity: float = Field(alias="Turbidity", description="Turbidity (NTU).")

    def to_row(self) -> dict[str, float]:
        """Return the measurements keyed by dataset column name, in column order.

        Returns:
            dict[str, float]: Mapping of column name to measured value.
        """
        values = self.model_dump(by_alias=True)
        return {column: values[column] for column in MEASUREMENT_COLUMNS}


class WaterSample(WaterMeasurements):
    """A labelled water sample: the nine measurements plus potability.

    Attributes:
        potability (bool): Whether the water is safe to drink.
    """

    potability: bool = Field(alias="Potability", description="Whether the water is safe to drink.")


DEFAULT_SAMPLE: Final[WaterMeasurements] = WaterMeasurements(
    ph=7.0,
    hardness=200.0,
    solids=15000.0,
    chloramines=8.0,
    sulfate=350.0,
    conductivity=400.0,
    organic_carbon=10.0,
    trihalomethanes=3.0,
    turbidity=2.0,
)

# ---------------------------------------------------------------------------
# Trainer configuration
# ---------------------------------------------------------------------------


class TrainerHyperparameters(BaseModel):
    """Hyperparameters for the gradient-boosted tree ensemble.

    Attributes:
        number_of_leaves (int): Maximum number of leaves per tree.
        minimum_example_count_per_leaf (int): Minimum training samples in a leaf.
        learning_rate (float): Shrinkage applied to each tree's contribution.
        number_of_trees (int): Number of boosting iterations.
    """

    model_config = ConfigDict(frozen=True)

    number_of_leaves: int = Field(default=20, ge=2, le=1024, description="Maximum number of leaves per tree.")
    minimum_example_count_per_leaf: int = Field(
        default=10,
        ge=1,
        le=10_000,
        description="Minimum number of training samples required in a leaf.",
    )
    learning_rate: float = Field(default=0.2, gt=0.0, le=1.0, description="Shrinkage applied to each tree.")
    number_of_trees: int = Field(default=100, ge=1, le=10_000, description="Number of boosting iterations.")


# ---------------------------------------------------------------------------
# Evaluation results
# ---------------------------------------------------------------------------


class ConfusionMatrix(BaseModel):
    """Counts of correct and incorrect predictions per class.

    Attributes:
        true_positives (int): Potable samples predicted potable.
        false_positives (int): Non-potable samples predicted potable.
        true_negatives (int): Non-potable samples predicted non-potable.
        false_negatives (int): Potable samples predicted non-potable.
    """

    model_config = ConfigDict(frozen=True)

    true_positives: int = Field(ge=0)
    false_positives: int = Field(ge=0)
    true_negatives: int = Field(ge=0)
    false_negatives: int = Field(ge=0)

    @property
    def total(self) -> int:
        """Total number of evaluated samples."""
        return self.true_positives + self.false_positives + self.true_negatives + self.false_negatives


class BinaryClassificationMetrics(BaseModel):
    """Aggregate quality metrics of a binary classifier on a labelled test set.

    Ratio metrics lie in [0, 1]. The ranking metrics are `None` when the test
    set holds a single class, because ROC and precision-recall curves are
    undefined there.

    Attributes:
        accuracy (float): Fraction of samples predicted correctly.
        area_under_roc_curve (float | None): Area under the ROC curve.
        f1_score (float): Harmonic mean of positive precision and recall.
        positive_precision (float): Precision of the potable class.
        positive_recall (float): Recall of the potable class.
        negative_precision (float): Precision of the non-potable class.
        negative_recall (float): Recall of the non-potable class.
        log_loss (float): Mean negative log-likelihood of the true labels.
        area_under_precision_recall_curve (float | None): Average precision
            of the potable class.
        confusion_matrix (ConfusionMatrix): Per-class prediction counts.
    """

    model_config = ConfigDict(frozen=True)

    accuracy: UnitInterval = Field(description="Fraction of samples predicted correctly.")
    area_under_roc_curve: UnitInterval | None = Field(description="Area under the ROC curve.")
    f1_score: UnitInterval = Field(description="Harmonic mean of positive precision and recall.")
    positive_precision: UnitInterval = Field(description="Precision of the potable class.")
    positive_recall: UnitInterval = Field(description="Recall of the potable class.")
    negative_precision: UnitInterval = Field(description="Precision of the non-potable class.")
    negative_recall: UnitInterval = Field(description="Recall of the non-potable class.")
    log_loss: float = Field(ge=0.0, description="Mean negative log-likelihood of the true labels.")
    area_under_precision_recall_curve: UnitInterval | None = Field(
        description="Average precision of the potable class.",
    )
    confusion_matrix: ConfusionMatrix
