"""Custom exceptions for the water-quality workflow.

Every error raised by wqkit derives from `WaterQualityError`, so callers can
catch the whole family with a single handler:

- NotFoundError: Raised when the input dataset path does not exist.
  Also a `FileNotFoundError`.
- DataFormatError: Raised when a row, column, or header of the input file is
  malformed. Also a `ValueError`.
- InvalidArgumentError: Raised for bad split fractions, empty datasets, and
  malformed prediction input. Also a `ValueError`.
- TrainingError: Raised when the training set cannot produce a classifier
  (empty, or a single label class).

Each error carries a `stage` attribute. It is `None` where the error is
raised and is filled in by the workflow runner when the error leaves a stage,
so the CLI can report which stage failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from wqkit.models import WorkflowStage


class WaterQualityError(Exception):
    """Base exception for all wqkit errors.

    Attributes:
        stage (WorkflowStage | None): The workflow stage that failed, or
            `None` when the error was raised outside the workflow runner.
    """

    stage: WorkflowStage | None

    def __init__(self, message: str, *, stage: WorkflowStage | None = None) -> None:
        """Initialize WaterQualityError.

        Args:
            message (str): Description of the failure.
            stage (WorkflowStage | None): The workflow stage that failed.
        """
        super().__init__(message)
        self.stage = stage

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Detailed string representation including message and stage.
        """
        return f"{self.__class__.__name__}(message={str(self)!r}, stage={self.stage!r})"


class NotFoundError(WaterQualityError, FileNotFoundError):
    """Raised when the input dataset path does not exist or is not a file.

    Attributes:
        path (Path): The path that could not be found.

    Examples:
        >>> from pathlib import Path
        >>> err = NotFoundError(Path("missing.csv"))
        >>> str(err)
        'Dataset file not found: missing.csv'
    """

    path: Path

    def __init__(self, path: Path, *, stage: WorkflowStage | None = None) -> None:
        """Initialize NotFoundError.

        Args:
            path (Path): The path that could not be found.
            stage (WorkflowStage | None): The workflow stage that failed.
        """
        super().__init__(f"Dataset file not found: {path}", stage=stage)
        self.path = path


class DataFormatError(WaterQualityError, ValueError):
    """Raised when the input file has a malformed header, row, or field.

    Attributes:
        path (Path | None): The file being read.
        line (int | None): 1-indexed line number of the offending row.
        column (str | None): Name of the offending column.

    Examples:
        >>> err = DataFormatError("Expected 10 fields, found 9", line=4)
        >>> err.line
        4
        >>> err.column is None
        True
    """

    path: Path | None
    line: int | None
    column: str | None

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: str | None = None,
        stage: WorkflowStage | None = None,
    ) -> None:
        """Initialize DataFormatError.

        Args:
            message (str): Description of the format problem.
            path (Path | None): The file being read.
            line (int | None): 1-indexed line number of the offending row.
            column (str | None): Name of the offending column.
            stage (WorkflowStage | None): The workflow stage that failed.
        """
        super().__init__(message, stage=stage)
        self.path = path
        self.line = line
        self.column = column

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Detailed string representation including location details.
        """
        return (
            f"{self.__class__.__name__}("
            f"message={str(self)!r}, path={self.path!r}, "
            f"line={self.line!r}, column={self.column!r}, stage={self.stage!r})"
        )


class InvalidArgumentError(WaterQualityError, ValueError):
    """Raised when an argument to a workflow operation is out of range or malformed.

    Attributes:
        argument (str): Name of the offending argument or field.

    Examples:
        >>> err = InvalidArgumentError("test_fraction must be in (0, 1), got 1.5", argument="test_fraction")
        >>> err.argument
        'test_fraction'
    """

    argument: str

    def __init__(self, message: str, *, argument: str, stage: WorkflowStage | None = None) -> None:
        """Initialize InvalidArgumentError.

        Args:
            message (str): Description of the problem.
            argument (str): Name of the offending argument or field.
            stage (WorkflowStage | None): The workflow stage that failed.
        """
        super().__init__(message, stage=stage)
        self.argument = argument

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Detailed string representation including the argument name.
        """
        return f"{self.__class__.__name__}(message={str(self)!r}, argument={self.argument!r}, stage={self.stage!r})"


class TrainingError(WaterQualityError):
    """Raised when the training set is empty or holds a single label class.

    Attributes:
        class_counts (dict[bool, int]): Number of training samples per label.

    Examples:
        >>> err = TrainingError("Training set contains a single label class", class_counts={True: 8})
        >>> err.class_counts
        {True: 8}
    """

    class_counts: dict[bool, int]

    def __init__(
        self,
        message: str,
        *,
        class_counts: dict[bool, int] | None = None,
        stage: WorkflowStage | None = None,
    ) -> None:
        """Initialize TrainingError.

        Args:
            message (str): Description of the problem.
            class_counts (dict[bool, int] | None): Number of training samples
                per label. Defaults to an empty mapping.
            stage (WorkflowStage | None): The workflow stage that failed.
        """
        super().__init__(message, stage=stage)
        self.class_counts = class_counts or {}

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Detailed string representation including class counts.
        """
        return (
            f"{self.__class__.__name__}("
            f"message={str(self)!r}, class_counts={self.class_counts!r}, stage={self.stage!r})"
        )
