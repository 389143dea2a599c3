from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from milk_rates.config import default_config
from milk_rates.loader import build_table

SCENARIO_ROWS = [
    ["FAT", "8.5", "9.0"],
    ["4.0", 45.0, 46.5],
    ["4.5", 47.0, 48.2],
]

WIDER_ROWS = [
    ["FAT", "8.0", "8.5", "9.0"],
    ["3.5", "40.5", "42.0", "43.5"],
    ["4.0", "43.0", "45.0", "46.5"],
    ["4.5", "45.5", "47.0", "48.2"],
]


def write_csv(path: Path, rows: list[list[object]]) -> Path:
    path.write_text("\n".join(",".join(str(c) for c in row) for row in rows) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def scenario_rows() -> list[list[object]]:
    return [list(row) for row in SCENARIO_ROWS]


@pytest.fixture
def scenario_table():
    return build_table(SCENARIO_ROWS)


@pytest.fixture
def chart_csv(tmp_path: Path) -> Path:
    return write_csv(tmp_path / "milk_rate_chart.csv", SCENARIO_ROWS)


@pytest.fixture
def chart_xlsx(tmp_path: Path) -> Path:
    path = tmp_path / "milk_rate_chart.xlsx"
    df = pd.DataFrame([["FAT", 8.5, 9.0], [4.0, 45.0, 46.5], [4.5, 47.0, 48.2]])
    df.to_excel(path, header=False, index=False, sheet_name="Rates")
    return path


@pytest.fixture
def app_config(tmp_path: Path, chart_csv: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("RATES_ADMIN_TOKEN", raising=False)
    monkeypatch.delenv("API_PORT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setenv("MILK_RATE_CHART", str(chart_csv))
    return default_config(tmp_path)
