"""Loading the water-quality dataset and splitting it into train/test subsets."""

from __future__ import annotations

import csv
import math
from collections.abc import Mapping
from pathlib import Path
from typing import Final, NamedTuple

import numpy as np
import polars as pl
from loguru import logger

from wqkit.context import RunContext
from wqkit.exceptions import DataFormatError, InvalidArgumentError, NotFoundError
from wqkit.logging import STAGE_LEVEL
from wqkit.models import SAMPLE_COLUMNS, WaterSample

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_POLARS_DTYPES: Final[Mapping[type, type[pl.DataType]]] = {float: pl.Float64, bool: pl.Boolean}

# Column dtypes follow the `WaterSample` field types, in file column order.
_DTYPES_BY_COLUMN = {field.alias: _POLARS_DTYPES[field.annotation] for field in WaterSample.model_fields.values()}
WATER_SAMPLE_SCHEMA: Final[Mapping[str, type[pl.DataType]]] = {
    column: _DTYPES_BY_COLUMN[column] for column in SAMPLE_COLUMNS
}

_TRUE_TOKENS: Final[frozenset[str]] = frozenset({"1", "true", "yes"})
_FALSE_TOKENS: Final[frozenset[str]] = frozenset({"0", "false", "no"})


class DatasetSplit(NamedTuple):
    """Disjoint training and test subsets of one dataset.

    Attributes:
        train (pl.DataFrame): Rows used to fit the feature pipeline and model.
        test (pl.DataFrame): Held-out rows used for evaluation.
    """

    train: pl.DataFrame
    test: pl.DataFrame


# ---------------------------------------------------------------------------
# Public interface -- Loading
# ---------------------------------------------------------------------------


def load_dataset(
    path: str | Path,
    *,
    separator: str = ",",
    has_header: bool = True,
    schema: Mapping[str, type[pl.DataType]] = WATER_SAMPLE_SCHEMA,
) -> pl.DataFrame:
    """Read a delimited text file into a typed DataFrame.

    Columns are matched by position against `schema`. Empty numeric fields are
    loaded as missing values (`NaN`); empty boolean fields are rejected.
    Boolean fields accept `1/0`, `true/false` and `yes/no`, case-insensitively.

    Args:
        path (str | Path): Location of the delimited file.
        separator (str): Single-character field separator. Defaults to ",".
        has_header (bool): Whether the first line is a header row. When True,
            the header must have one field per schema column; its names are
            ignored.
        schema (Mapping[str, type[pl.DataType]]): Ordered mapping of column
            name to Polars dtype. Supported dtypes are `pl.Float64` and
            `pl.Boolean`.

    Returns:
        pl.DataFrame: One row per data line, typed according to `schema`.

    Raises:
        NotFoundError: If `path` does not exist or is not a regular file.
        DataFormatError: If the file is not UTF-8 text, is malformed, or its
            header, a row's field count or a field's value does not match
            `schema`.
        InvalidArgumentError: If `separator` is not a single character.
    """
    path = Path(path)
    if len(separator) != 1:
        raise InvalidArgumentError(f"separator must be a single character, got {separator!r}", argument="separator")
    if not path.is_file():
        raise NotFoundError(path)

    column_names = list(schema)
    columns: dict[str, list[str]] = {name: [] for name in column_names}
    line_numbers: list[int] = []

    # utf-8-sig drops a leading byte-order mark from the first header field.
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.reader(handle, delimiter=separator)
        try:
            if has_header:
                _validate_header(next(reader, None), column_names, path)
            for row in reader:
                if not row:
                    continue
                if len(row) != len(column_names):
                    raise DataFormatError(
                        f"Expected {len(column_names)} fields, found {len(row)} on line {reader.line_num}",
                        path=path,
                        line=reader.line_num,
                    )
                line_numbers.append(reader.line_num)
                for name, value in zip(column_names, row, strict=True):
                    columns[name].append(value)
        except UnicodeDecodeError as exc:
            raise DataFormatError(
                f"File is not valid UTF-8 text after line {reader.line_num}: {exc.reason}",
                path=path,
                line=reader.line_num + 1,
            ) from exc
        except csv.Error as exc:
            raise DataFormatError(
                f"Malformed delimited text on line {reader.line_num}: {exc}",
                path=path,
                line=reader.line_num,
            ) from exc

    series = [
        _parse_column(name, columns[name], dtype, line_numbers=line_numbers, path=path)
        for name, dtype in schema.items()
    ]
    dataset = pl.DataFrame(series)
    logger.log(STAGE_LEVEL, "Dataset loaded", path=str(path), samples=dataset.height)
    return dataset


# ---------------------------------------------------------------------------
# Public interface -- Splitting
# ---------------------------------------------------------------------------


def train_test_split(
    dataset: pl.DataFrame,
    *,
    test_fraction: float = 0.2,
    context: RunContext | None = None,
) -> DatasetSplit:
    """Randomly partition a dataset into disjoint training and test subsets.

    The test subset holds `round(test_fraction * n)` rows (halves round up)
    and the training subset holds the rest. Rows keep their original relative
    order inside each subset.

    Args:
        dataset (pl.DataFrame): The rows to partition.
        test_fraction (float): Fraction of rows assigned to the test subset.
            Must lie strictly between 0 and 1.
        context (RunContext | None): Supplies the random seed. `None` uses an
            unseeded context, so the split differs between runs.

    Returns:
        DatasetSplit: The `(train, test)` pair.

    Raises:
        InvalidArgumentError: If `test_fraction` is outside (0, 1) or the
            dataset is empty.
    """
    if not 0.0 < test_fraction < 1.0:
        raise InvalidArgumentError(
            f"test_fraction must be in (0, 1), got {test_fraction}",
            argument="test_fraction",
        )
    if dataset.height == 0:
        raise InvalidArgumentError("Cannot split an empty dataset", argument="dataset")

    context = context or RunContext()
    n_rows = dataset.height
    test_count = _round_half_up(test_fraction * n_rows)

    permutation = context.rng().permutation(n_rows)
    test_mask = np.zeros(n_rows, dtype=bool)
    test_mask[permutation[:test_count]] = True

    split = DatasetSplit(train=dataset.filter(pl.Series(~test_mask)), test=dataset.filter(pl.Series(test_mask)))
    logger.log(
        STAGE_LEVEL,
        "Dataset split",
        samples=n_rows,
        train_samples=split.train.height,
        test_samples=split.test.height,
        seed=context.seed,
    )
    return split


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _validate_header(header: list[str] | None, column_names: list[str], path: Path) -> None:
    """Raise `DataFormatError` unless the header has one field per schema column.

    Header names are not compared; columns are matched by position, so files
    that spell a column differently (`ph` for `pH`) still load.

    Args:
        header (list[str] | None): The parsed header row, or `None` for an empty file.
        column_names (list[str]): Expected column names in order.
        path (Path): The file being read, for error reporting.

    Raises:
        DataFormatError: If the header is missing or has the wrong field count.
    """
    if header is None:
        raise DataFormatError("File is empty; expected a header row", path=path, line=1)
    if len(header) != len(column_names):
        raise DataFormatError(
            f"Header has {len(header)} fields, expected {len(column_names)} ({', '.join(column_names)})",
            path=path,
            line=1,
        )


def _parse_column(
    name: str,
    raw_values: list[str],
    dtype: type[pl.DataType],
    *,
    line_numbers: list[int],
    path: Path,
) -> pl.Series:
    """Convert the raw text of one column to a typed Polars Series.

    Args:
        name (str): Column name.
        raw_values (list[str]): Field text for every data row.
        dtype (type[pl.DataType]): Target dtype, `pl.Float64` or `pl.Boolean`.
        line_numbers (list[int]): File line number of every data row.
        path (Path): The file being read, for error reporting.

    Returns:
        pl.Series: The typed column.

    Raises:
        DataFormatError: If a value cannot be parsed as `dtype`.
        ValueError: If `dtype` is not supported.
    """
    if dtype == pl.Float64:
        parse = _parse_float
    elif dtype == pl.Boolean:
        parse = _parse_bool
    else:
        raise ValueError(f"Unsupported dtype {dtype} for column '{name}'")

    values = []
    for raw, line in zip(raw_values, line_numbers, strict=True):
        try:
            values.append(parse(raw))
        except ValueError as exc:
            raise DataFormatError(
                f"Invalid value {raw!r} in column '{name}' on line {line}: {exc}",
                path=path,
                line=line,
                column=name,
            ) from exc
    return pl.Series(name, values, dtype=dtype)


def _parse_float(raw: str) -> float:
    """Parse a numeric field; an empty field is a missing value.

    Args:
        raw (str): The field text.

    Returns:
        float: The parsed value, or `NaN` when the field is empty.
    """
    text = raw.strip()
    if not text:
        return math.nan
    return float(text)


def _parse_bool(raw: str) -> bool:
    """Parse a boolean label field.

    Args:
        raw (str): The field text.

    Returns:
        bool: The parsed label.

    Raises:
        ValueError: If the text is not one of the accepted boolean tokens.
    """
    text = raw.strip().lower()
    if text in _TRUE_TOKENS:
        return True
    if text in _FALSE_TOKENS:
        return False
    raise ValueError(f"expected one of {sorted(_TRUE_TOKENS | _FALSE_TOKENS)}")


def _round_half_up(value: float) -> int:
    """Round a non-negative value to the nearest integer, halves rounding up.

    Args:
        value (float): A non-negative number.

    Returns:
        int: The rounded value.
    """
    return math.floor(value + 0.5)
