# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from rowbridge.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """format:
  preset: default
  null_token: ""
csv:
  separator: ","
  newline: "\\n"
read:
  header_rows: 1
  columns:
    0: name
    1: age
    2: city
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "rowbridge.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def people_csv(temp_workdir: Path) -> Path:
    p = temp_workdir / "data" / "people.csv"
    p.write_text("Name,Age,City\nAnn,30,Linz\nBo,41,Graz\nCy,19,Wels\n", encoding="utf-8")
    return p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()
