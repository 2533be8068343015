"""Command-line entry point: train, evaluate, and predict on a water-quality dataset."""

from __future__ import annotations

import argparse
import contextlib
import sys
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from wqkit.exceptions import InvalidArgumentError, WaterQualityError
from wqkit.logging import LOG_LEVELS, enable_logging
from wqkit.models import DEFAULT_SAMPLE, MEASUREMENT_COLUMNS, BinaryClassificationMetrics
from wqkit.prediction import validate_measurements
from wqkit.settings import WaterQualitySettings
from wqkit.workflow import WorkflowResult, run_workflow

EXIT_OK = 0
EXIT_FAILURE = 1

_HYPERPARAMETER_FLAGS: tuple[str, ...] = (
    "number_of_leaves",
    "minimum_example_count_per_leaf",
    "learning_rate",
    "number_of_trees",
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the `wqkit` command.

    Returns:
        argparse.ArgumentParser: The configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="wqkit",
        description="Train a potability classifier on a water-quality dataset, evaluate it, and predict one sample.",
    )
    parser.add_argument("data_path", nargs="?", default=None, help="Path to the comma-separated dataset file.")
    parser.add_argument("--test-fraction", type=float, help="Fraction of samples held out for evaluation (0.2).")
    parser.add_argument("--seed", type=int, help="Random seed for a reproducible split and model.")
    parser.add_argument("--accuracy-threshold", type=float, help="Minimum acceptable test accuracy (0.70).")
    parser.add_argument("--number-of-leaves", type=int, help="Maximum leaves per tree (20).")
    parser.add_argument("--minimum-example-count-per-leaf", type=int, help="Minimum samples per leaf (10).")
    parser.add_argument("--learning-rate", type=float, help="Boosting learning rate (0.2).")
    parser.add_argument("--number-of-trees", type=int, help="Number of boosting iterations (100).")
    parser.add_argument("--separator", help="Field separator of the dataset file (',').")
    parser.add_argument("--no-header", action="store_true", help="The dataset file has no header row.")
    parser.add_argument(
        "--sample",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help=f"Override one measurement of the prediction sample. Fields: {', '.join(MEASUREMENT_COLUMNS)}.",
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING", help="Log level on stderr (WARNING).")
    parser.add_argument("--no-wait", action="store_true", help="Exit without waiting for Enter.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the workflow from command-line arguments and print the report.

    Args:
        argv (Sequence[str] | None): Arguments excluding the program name.
            Defaults to `sys.argv[1:]`.

    Returns:
        int: Process exit code; 0 on success, 1 when a stage fails.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    sample_overrides = _parse_sample_overrides(parser, args.sample)

    with enable_logging(level=args.log_level):
        try:
            settings = build_settings(args, sample_overrides)
            result = run_workflow(settings)
        except WaterQualityError as exc:
            stage = exc.stage.value if exc.stage is not None else "configuration"
            print(f"Error in {stage} stage: {exc}", file=sys.stderr)
            return EXIT_FAILURE

    print(format_report(result))
    if not args.no_wait:
        _wait_for_enter()
    return EXIT_OK


def build_settings(args: argparse.Namespace, sample_overrides: dict[str, str]) -> WaterQualitySettings:
    """Combine parsed arguments with environment settings.

    Args:
        args (argparse.Namespace): Parsed command-line arguments.
        sample_overrides (dict[str, str]): Prediction sample fields to override,
            keyed by column name.

    Returns:
        WaterQualitySettings: The validated settings.

    Raises:
        InvalidArgumentError: If a value is out of range, the data path is
            missing, or a sample override is not numeric.
    """
    overrides: dict[str, Any] = {}
    for name in ("data_path", "test_fraction", "seed", "accuracy_threshold", "separator"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.no_header:
        overrides["has_header"] = False
    hyperparameters = {
        name: getattr(args, name) for name in _HYPERPARAMETER_FLAGS if getattr(args, name) is not None
    }
    if hyperparameters:
        overrides["hyperparameters"] = hyperparameters
    if sample_overrides:
        overrides["sample"] = validate_measurements({**DEFAULT_SAMPLE.to_row(), **sample_overrides})

    try:
        return WaterQualitySettings(**overrides)
    except ValidationError as exc:
        first_error = exc.errors()[0]
        argument = ".".join(str(part) for part in first_error["loc"]) or "settings"
        raise InvalidArgumentError(f"Invalid setting '{argument}': {first_error['msg']}", argument=argument) from exc


def format_report(result: WorkflowResult) -> str:
    """Render the metrics, advisory, and prediction as printed lines.

    Args:
        result (WorkflowResult): Output of `run_workflow`.

    Returns:
        str: The report, one item per line.
    """
    return "\n".join([
        *_format_metrics(result.metrics),
        result.advisory.value,
        f"Predicted Potability: {result.prediction}",
    ])


def _format_metrics(metrics: BinaryClassificationMetrics) -> list[str]:
    auc = "n/a" if metrics.area_under_roc_curve is None else f"{metrics.area_under_roc_curve:.2%}"
    return [
        f"Accuracy: {metrics.accuracy:.2%}",
        f"AUC: {auc}",
        f"F1 Score: {metrics.f1_score:.2%}",
    ]


def _parse_sample_overrides(parser: argparse.ArgumentParser, pairs: list[str]) -> dict[str, str]:
    """Parse repeated `FIELD=VALUE` options, exiting with a usage error on bad input.

    Args:
        parser (argparse.ArgumentParser): Parser used to report usage errors.
        pairs (list[str]): Raw `FIELD=VALUE` strings.

    Returns:
        dict[str, str]: Raw values keyed by column name.
    """
    columns_by_lower = {column.lower(): column for column in MEASUREMENT_COLUMNS}
    overrides: dict[str, str] = {}
    for pair in pairs:
        field_name, separator, value = pair.partition("=")
        column = columns_by_lower.get(field_name.strip().lower())
        if not separator or column is None:
            parser.error(f"--sample expects FIELD=VALUE with FIELD one of {', '.join(MEASUREMENT_COLUMNS)}; got {pair!r}")
        overrides[column] = value.strip()
    return overrides


def _wait_for_enter() -> None:
    print("Press Enter to exit...")
    with contextlib.suppress(EOFError):
        input()
