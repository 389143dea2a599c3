from pathlib import Path

from milk_rates.__main__ import main

from conftest import write_csv


def test_check_valid_chart(chart_csv: Path, capsys):
    assert main(["check", str(chart_csv)]) == 0

    out = capsys.readouterr().out
    assert "2 FAT rows x 2 SNF columns" in out
    assert "FAT: 4.0, 4.5" in out
    assert "SNF: 8.5, 9.0" in out


def test_check_invalid_chart(tmp_path: Path, capsys):
    path = write_csv(tmp_path / "bad.csv", [["FAT", "8.5"], ["4.0", "free"]])

    assert main(["check", str(path)]) == 1
    assert "row 1, column 1" in capsys.readouterr().err
