"""
Internal models for the rate engine.

RateTable is the unified format every rate chart is loaded into, whatever the
source file looked like. Lookup logic only ever sees this structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal


@dataclass(frozen=True)
class AxisEntry:
    """One sampled FAT or SNF value and where it lives in the grid."""
    value: Decimal
    original_index: int
    label: str


@dataclass(frozen=True)
class RateTable:
    """
    Immutable snapshot of a rate chart.

    Attributes:
        fat_axis: FAT entries sorted ascending by value (stable sort)
        snf_axis: SNF entries sorted ascending by value (stable sort)
        grid: Rates addressed as grid[fat.original_index][snf.original_index].
            Rows and columns stay in source order; only the axes are sorted.
        fat_labels: FAT labels as written in the source, in source order
        snf_labels: SNF labels as written in the source, in source order
        header_label: The ignored top-left cell (usually "FAT")
        source: Human readable description of where the chart came from
        source_mtime: Modification time of the chart file, if it was a file
        version: Publish counter, set by the ReloadController
        loaded_at: When the chart was parsed
    """
    fat_axis: tuple[AxisEntry, ...] = ()
    snf_axis: tuple[AxisEntry, ...] = ()
    grid: tuple[tuple[Decimal, ...], ...] = ()
    fat_labels: tuple[str, ...] = ()
    snf_labels: tuple[str, ...] = ()
    header_label: str = ""
    source: str = "empty"
    source_mtime: float | None = None
    version: int = 0
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def row_count(self) -> int:
        return len(self.fat_axis)

    @property
    def column_count(self) -> int:
        return len(self.snf_axis)

    @property
    def is_empty(self) -> bool:
        return not self.fat_axis or not self.snf_axis

    def rate_at(self, fat_index: int, snf_index: int) -> Decimal:
        return self.grid[fat_index][snf_index]


@dataclass(frozen=True)
class RateQuote:
    """Result of resolving a FAT/SNF pair against a table."""
    fat: Decimal
    snf: Decimal
    rate: Decimal
    matched_fat: str
    matched_snf: str
    exact: bool
    table_version: int = 0
    quantity: Decimal | None = None
    amount: Decimal | None = None


@dataclass(frozen=True)
class AxisValues:
    fat: tuple[str, ...]
    snf: tuple[str, ...]


@dataclass(frozen=True)
class ReloadResult:
    row_count: int
    column_count: int
    version: int
    source: str = ""


# Readings, rates and quantities beyond +/-1e15 cannot be real chart values and
# would overflow the decimal context once subtracted or multiplied.
MAX_ADJUSTED_EXPONENT = 15


def within_range(number: Decimal) -> bool:
    return number.is_zero() or -MAX_ADJUSTED_EXPONENT <= number.adjusted() <= MAX_ADJUSTED_EXPONENT
