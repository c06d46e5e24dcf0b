from __future__ import annotations

from pathlib import Path

from rowbridge.cli import main as cli_main


def test_inspect_prints_rows(people_csv: Path, capsys):
    assert cli_main(["inspect", str(people_csv), "--rows", "2"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "FILE: people.csv rows=4"
    assert out[1] == "  [0] ['Name', 'Age', 'City']"
    assert out[2] == "  [1] ['Ann', '30', 'Linz']"
    assert len(out) == 3


def test_inspect_skips_removed_rows(temp_workdir: Path, capsys):
    src = temp_workdir / "data" / "gaps.csv"
    src.write_text("a,b\n\nc,d\n", encoding="utf-8")
    assert cli_main(["inspect", str(src)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "FILE: gaps.csv rows=3"
    assert out[1:] == ["  [0] ['a', 'b']", "  [2] ['c', 'd']"]


def test_inspect_missing_sheet(temp_workdir: Path, people_csv: Path, capsys):
    xlsx = temp_workdir / "data" / "p.xlsx"
    assert cli_main(["convert", str(people_csv), str(xlsx)]) == 0
    cfg = temp_workdir / "config" / "sheet.yml"
    cfg.write_text("read:\n  sheet: Missing\n", encoding="utf-8")
    assert cli_main(["--config", str(cfg), "inspect", str(xlsx)]) == 1
    assert "sheet 'Missing' not found" in capsys.readouterr().out
