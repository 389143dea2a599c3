"""
Rate resolution against a published RateTable.

Each axis is matched on its own: an exact numeric match wins, otherwise the
closest sampled value is used. Sensor readings rarely land exactly on the
chart's sampled values, so the nearest-neighbour fallback is the normal path.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
import logging
from typing import Any, Sequence

from milk_rates.errors import InvalidInput, RateUnavailable
from milk_rates.models import AxisEntry, RateQuote, RateTable, within_range

logger = logging.getLogger(__name__)


def parse_measurement(value: Any, *, field: str) -> Decimal:
    """
    Convert a caller supplied FAT/SNF (or quantity) into a Decimal.

    Floats go through str() so 4.2 becomes Decimal("4.2"), not the binary
    approximation.

    Raises:
        InvalidInput: None, bools, non-numeric strings, NaN, infinities and
            magnitudes outside 1e-15..1e15
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput(field, value)
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise InvalidInput(field, value) from e
    else:
        raise InvalidInput(field, value)

    if not number.is_finite() or not within_range(number):
        raise InvalidInput(field, value)
    if number.is_zero():
        return Decimal(0)
    return number


def select_entry(axis: Sequence[AxisEntry], requested: Decimal) -> tuple[AxisEntry, bool]:
    """
    Pick the axis entry for a requested value.

    Returns (entry, exact). The scan runs over the sorted axis; the first
    numerically equal entry is returned immediately. Otherwise the running
    best is replaced only by a strictly closer entry, or by an equally close
    one with a lower original index.
    """
    best: AxisEntry | None = None
    best_diff: Decimal | None = None

    for entry in axis:
        if entry.value == requested:
            return entry, True
        diff = abs(entry.value - requested)
        if best is None or diff < best_diff or (diff == best_diff and entry.original_index < best.original_index):
            best = entry
            best_diff = diff

    if best is None:
        raise RateUnavailable("Rate chart has no sampled values on this axis")
    return best, False


def resolve_quote(table: RateTable, fat: Any, snf: Any) -> RateQuote:
    fat_value = parse_measurement(fat, field="fat")
    snf_value = parse_measurement(snf, field="snf")

    if table.is_empty:
        raise RateUnavailable(
            f"Rate chart is empty ({table.row_count} FAT rows x {table.column_count} SNF columns)"
        )

    fat_entry, fat_exact = select_entry(table.fat_axis, fat_value)
    snf_entry, snf_exact = select_entry(table.snf_axis, snf_value)
    rate = table.rate_at(fat_entry.original_index, snf_entry.original_index)

    if not (fat_exact and snf_exact):
        logger.debug(
            "No exact chart match for FAT=%s SNF=%s, using FAT=%s SNF=%s",
            fat_value,
            snf_value,
            fat_entry.label,
            snf_entry.label,
        )

    return RateQuote(
        fat=fat_value,
        snf=snf_value,
        rate=rate,
        matched_fat=fat_entry.label,
        matched_snf=snf_entry.label,
        exact=fat_exact and snf_exact,
        table_version=table.version,
    )


def resolve(table: RateTable, fat: Any, snf: Any) -> Decimal:
    """Rate for a FAT/SNF pair. See resolve_quote for the match details."""
    return resolve_quote(table, fat, snf).rate
