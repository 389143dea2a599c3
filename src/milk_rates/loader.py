"""
Rate chart loader.

Turns a rectangular block of cells into a RateTable:

    FAT   8.5   9.0   <- row 0: header label, then SNF labels
    4.0   45.0  46.5  <- rows 1..n: FAT label, then one rate per SNF column
    4.5   47.0  48.2

Sources can be a chart file (.xlsx / .xls / .csv), a DataFrame of raw cells or
a plain sequence of rows. Loading never publishes anything; see
controller.ReloadController for that.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
import logging
import math
from numbers import Number
from pathlib import Path
from typing import Any, Sequence, Union

import pandas as pd

from milk_rates.detector import detect_format
from milk_rates.errors import LoadError
from milk_rates.models import AxisEntry, RateTable, within_range

logger = logging.getLogger(__name__)

ChartSource = Union[str, Path, pd.DataFrame, Sequence[Sequence[Any]]]


def load(source: ChartSource, *, sheet_name: str | int | None = None) -> RateTable:
    """
    Parse a rate chart into an immutable RateTable.

    Args:
        source: Path to a chart file, a DataFrame of raw cells (row 0 is the
            SNF header, not the DataFrame's column index) or a sequence of rows
        sheet_name: Worksheet to read from spreadsheet files (first by default)

    Returns:
        A fresh RateTable with version 0

    Raises:
        LoadError: the source is missing, unreadable, ragged or has a cell
            that is not a non-negative number
    """
    source_desc = "rows"
    source_mtime = None

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            source_mtime = path.stat().st_mtime
        except FileNotFoundError as e:
            raise LoadError(f"Rate chart not found: {path}") from e
        except OSError as e:
            raise LoadError(f"Could not access rate chart {path}: {e}") from e
        cells = read_cells(path, sheet_name=sheet_name)
        source_desc = str(path)
    elif isinstance(source, pd.DataFrame):
        cells = _frame_to_cells(source)
        source_desc = "dataframe"
    else:
        cells = [list(row) for row in source]

    table = build_table(cells, source=source_desc, source_mtime=source_mtime)
    logger.info(
        "Loaded rate chart from %s: %d FAT rows x %d SNF columns",
        source_desc,
        table.row_count,
        table.column_count,
    )
    return table


def read_cells(path: Path, *, sheet_name: str | int | None = None) -> list[list[Any]]:
    if not path.exists():
        raise LoadError(f"Rate chart not found: {path}")

    try:
        fmt = detect_format(path)
    except OSError as e:
        raise LoadError(f"Could not open rate chart {path}: {e}") from e

    try:
        if fmt == "csv":
            df = pd.read_csv(
                path,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
            )
        else:
            df = pd.read_excel(
                path,
                sheet_name=0 if sheet_name is None else sheet_name,
                header=None,
                dtype=object,
            )
    except Exception as e:  # noqa: BLE001
        raise LoadError(f"Could not read {fmt} rate chart {path}: {e.__class__.__name__}: {e}") from e

    return _frame_to_cells(df)


def build_table(
    cells: Sequence[Sequence[Any]],
    *,
    source: str = "rows",
    source_mtime: float | None = None,
) -> RateTable:
    rows = _trim(cells)
    if not rows:
        raise LoadError("Rate chart has no header row")

    header = rows[0]
    width = len(header)
    header_label = _label(header[0]) if header else ""

    snf_values: list[Decimal] = []
    snf_labels: list[str] = []
    for col in range(1, width):
        snf_values.append(_to_decimal(header[col], row=0, column=col))
        snf_labels.append(_label(header[col]))

    fat_values: list[Decimal] = []
    fat_labels: list[str] = []
    rates: list[list[Decimal]] = []
    for row_idx in range(1, len(rows)):
        row = rows[row_idx]
        if not row:
            raise LoadError("Blank row inside rate chart", row=row_idx, column=0, raw_value="")
        if len(row) != width:
            extra = row[width] if len(row) > width else None
            raise LoadError(
                f"Row has {len(row)} cells but the header has {width}",
                row=row_idx,
                column=min(len(row), width),
                raw_value=extra,
            )
        fat_values.append(_to_decimal(row[0], row=row_idx, column=0))
        fat_labels.append(_label(row[0]))
        rates.append([_to_decimal(row[col], row=row_idx, column=col) for col in range(1, width)])

    fat_keep = _last_occurrences(fat_values, axis="FAT")
    snf_keep = _last_occurrences(snf_values, axis="SNF")

    return RateTable(
        fat_axis=_sorted_axis([fat_values[i] for i in fat_keep], [fat_labels[i] for i in fat_keep]),
        snf_axis=_sorted_axis([snf_values[j] for j in snf_keep], [snf_labels[j] for j in snf_keep]),
        grid=tuple(tuple(rates[i][j] for j in snf_keep) for i in fat_keep),
        fat_labels=tuple(fat_labels[i] for i in fat_keep),
        snf_labels=tuple(snf_labels[j] for j in snf_keep),
        header_label=header_label,
        source=source,
        source_mtime=source_mtime,
    )


def _frame_to_cells(df: pd.DataFrame) -> list[list[Any]]:
    return df.astype(object).where(pd.notna(df), None).values.tolist()


def _trim(cells: Sequence[Sequence[Any]]) -> list[list[Any]]:
    # Spreadsheet exports carry trailing blank cells and rows; drop those only.
    rows: list[list[Any]] = []
    for raw in cells:
        row = list(raw)
        while row and _is_blank(row[-1]):
            row.pop()
        rows.append(row)
    while rows and not rows[-1]:
        rows.pop()
    return rows


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _label(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_decimal(value: Any, *, row: int, column: int) -> Decimal:
    if _is_blank(value):
        raise LoadError("Empty cell", row=row, column=column, raw_value="" if value is None else value)
    if isinstance(value, bool) or not isinstance(value, (str, Number)):
        raise LoadError("Not a number", row=row, column=column, raw_value=value)

    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as e:
        raise LoadError("Not a number", row=row, column=column, raw_value=value) from e

    if not number.is_finite():
        raise LoadError("Not a finite number", row=row, column=column, raw_value=value)
    if not within_range(number):
        raise LoadError("Value out of range", row=row, column=column, raw_value=value)
    if number < 0:
        raise LoadError("Negative value", row=row, column=column, raw_value=value)
    return number


def _last_occurrences(values: list[Decimal], *, axis: str) -> list[int]:
    """Positions to keep when an axis repeats a value: the last one wins."""
    last: dict[Decimal, int] = {}
    for pos, value in enumerate(values):
        last[value] = pos
    if len(last) != len(values):
        logger.warning("%s axis has %d duplicate value(s); keeping the last occurrence", axis, len(values) - len(last))
    return sorted(last.values())


def _sorted_axis(values: list[Decimal], labels: list[str]) -> tuple[AxisEntry, ...]:
    entries = [AxisEntry(value=v, original_index=i, label=labels[i]) for i, v in enumerate(values)]
    # sorted() is stable, so equal values keep source order
    return tuple(sorted(entries, key=lambda e: e.value))
