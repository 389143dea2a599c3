from __future__ import annotations

from typing import Any


class RateEngineError(Exception):
    pass


class LoadError(RateEngineError):
    """A rate chart could not be turned into a RateTable.

    ``row`` and ``column`` are zero-based source coordinates (row 0 is the SNF
    header, column 0 the FAT labels). Both are ``None`` when the failure is not
    tied to a cell, e.g. a missing file.
    """

    def __init__(
        self,
        reason: str,
        *,
        row: int | None = None,
        column: int | None = None,
        raw_value: Any = None,
    ) -> None:
        self.reason = reason
        self.row = row
        self.column = column
        self.raw_value = raw_value
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.row is None and self.column is None:
            return self.reason
        where = f"row {self.row}" if self.column is None else f"row {self.row}, column {self.column}"
        return f"{self.reason} at {where} (value: {self.raw_value!r})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "reason": self.reason,
            "row": self.row,
            "column": self.column,
            "raw_value": None if self.raw_value is None else str(self.raw_value),
        }


class InvalidInput(RateEngineError):
    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a finite number, got {value!r}")


class RateUnavailable(RateEngineError):
    pass
