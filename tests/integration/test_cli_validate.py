from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rowbridge.cli import main as cli_main


@dataclass
class Person:
    name: str
    age: int
    city: str


SCHEMA = f"{__name__}:Person"


def test_validate_success_and_summary(write_config: Path, people_csv: Path, capsys):
    code = cli_main(["--config", str(write_config), "validate", str(people_csv), "--schema", SCHEMA])
    assert code == 0
    out = capsys.readouterr().out
    assert "INFO validated 3 records of Person" in out
    assert "SUMMARY rows=3 header_rows=1 columns=3" in out


def test_validate_renders_output(write_config: Path, people_csv: Path):
    dest = people_csv.with_name("typed.csv")
    code = cli_main(["--config", str(write_config), "validate", str(people_csv), "--schema", SCHEMA, "--output", str(dest)])
    assert code == 0
    assert dest.read_text(encoding="utf-8-sig") == "name,age,city\nAnn,30,Linz\nBo,41,Graz\nCy,19,Wels\n"


def test_validate_positional_mapping_without_config(people_csv: Path):
    # ヘッダー行も値として読むので Age 列が数値でなく失敗する
    assert cli_main(["validate", str(people_csv), "--schema", SCHEMA]) == 2


def test_validate_unknown_field_in_mapping(temp_workdir: Path, people_csv: Path, capsys):
    cfg = temp_workdir / "config" / "bad_columns.yml"
    cfg.write_text("read:\n  header_rows: 1\n  columns:\n    0: nickname\n", encoding="utf-8")
    code = cli_main(["--config", str(cfg), "validate", str(people_csv), "--schema", SCHEMA])
    assert code == 1
    assert "nickname" in capsys.readouterr().out


def test_validate_debug_flag(write_config: Path, people_csv: Path, capsys):
    code = cli_main(["--config", str(write_config), "--debug", "validate", str(people_csv), "--schema", SCHEMA])
    assert code == 0
    assert "DEBUG debug mode enabled" in capsys.readouterr().out


def test_validate_positional_read_uses_configured_mapper(temp_workdir: Path, capsys):
    cfg = temp_workdir / "config" / "remap.yml"
    cfg.write_text(
        'csv:\n  separator: ","\n  newline: "\\n"\n'
        "read:\n  header_rows: 1\n"
        "mapper:\n  map_indices:\n    0: 2\n",
        encoding="utf-8",
    )
    src = temp_workdir / "data" / "remapped.csv"
    src.write_text("Age,City,Name\n30,Linz,Ann\n", encoding="utf-8")
    dest = src.with_name("typed.csv")
    code = cli_main(["--config", str(cfg), "validate", str(src), "--schema", SCHEMA, "--output", str(dest)])
    assert code == 0
    assert "INFO validated 1 records of Person" in capsys.readouterr().out
    assert dest.read_text(encoding="utf-8-sig").splitlines() == ["age,city,name", "30,Linz,Ann"]
