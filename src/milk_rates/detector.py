"""
Auto-detect rate chart file format.

Looks at the file itself to decide which pandas reader to use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

ChartFormat = Literal["xlsx", "xls", "csv"]

# xlsx is a zip container, legacy xls an OLE2 compound document
_ZIP_MAGIC = b"PK\x03\x04"
_OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def detect_format(path: Path) -> ChartFormat:
    """
    Determine how a rate chart file should be read.

    Detection rules:
    1. Spreadsheet signatures win over the extension (charts are often
       re-saved under the wrong name)
    2. Otherwise the suffix decides (.xlsx / .xlsm / .xls)
    3. Anything else is treated as CSV text

    Args:
        path: Path to the chart file

    Returns:
        "xlsx", "xls", or "csv"
    """
    with path.open("rb") as f:
        head = f.read(8)

    if head.startswith(_ZIP_MAGIC):
        return "xlsx"
    if head.startswith(_OLE2_MAGIC):
        return "xls"

    suffix = path.suffix.lower()
    if suffix in {".xlsx", ".xlsm"}:
        return "xlsx"
    if suffix == ".xls":
        return "xls"

    return "csv"
