from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..delimited.format import DelimitedFormat, DelimitedFormatError
from ..delimited.modifiers import ModifierList
from ..models.config_models import CsvSettings, ExcelSettings, ReadSettings, RowbridgeConfig
from ..models.format_config import (
    FloatFormat,
    FormatConfig,
    MoneyFormat,
    new_english_format_config,
    new_format_config,
    new_german_format_config,
)
from ..services.column_mapper import FieldColumnMapper, space_pascal_case

"""YAML config loader.

Responsibilities:
- Load the YAML file (``yaml.safe_load``)
- Validate it against ``config_schema.json`` (jsonschema)
- Apply defaults and build the frozen ``RowbridgeConfig``

Every problem surfaces as ``ConfigError``.
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "load_config",
    "config_from_dict",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

_PRESETS = {
    "default": new_format_config,
    "english": new_english_format_config,
    "german": new_german_format_config,
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: schema file missing/invalid or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"config validation failed at {location}: {e.message}") from e


def _stringify_keys(section: dict[str, Any] | None, key: str) -> None:
    # YAML の `0: Name` は int キーになるので検証前に文字列へ揃える
    if section and isinstance(section.get(key), dict):
        section[key] = {str(k): v for k, v in section[key].items()}


def _build_format(raw: dict[str, Any]) -> FormatConfig:
    base = _PRESETS[raw.get("preset", "default")]()
    changes: dict[str, Any] = {}
    for key in ("null_token", "true_token", "false_token", "date_layout", "time_layout"):
        if key in raw:
            changes[key] = raw[key]
    if "float" in raw:
        f = raw["float"]
        changes["float_format"] = FloatFormat(
            thousands_sep=f.get("thousands_sep", base.float_format.thousands_sep),
            decimal_sep=f.get("decimal_sep", base.float_format.decimal_sep),
            precision=f.get("precision", base.float_format.precision),
            pad_precision=f.get("pad_precision", base.float_format.pad_precision),
        )
    if "money" in raw:
        m = raw["money"]
        changes["money_format"] = MoneyFormat(
            currency_first=m.get("currency_first", base.money_format.currency_first),
            thousands_sep=m.get("thousands_sep", base.money_format.thousands_sep),
            decimal_sep=m.get("decimal_sep", base.money_format.decimal_sep),
            precision=m.get("precision", base.money_format.precision),
        )
    return base.with_options(**changes) if changes else base


def _build_mapper(raw: dict[str, Any]) -> FieldColumnMapper:
    mapper = FieldColumnMapper()
    if "tag" in raw:
        mapper = mapper.with_tag(raw["tag"])
    if "ignore_title" in raw:
        mapper = mapper.with_ignore_title(raw["ignore_title"])
    if raw.get("untagged_field_title") == "none":
        mapper = mapper.with_untagged_field_title(None)
    elif raw.get("untagged_field_title") == "space_pascal_case":
        mapper = mapper.with_untagged_field_title(space_pascal_case)
    if raw.get("map_indices"):
        mapper = mapper.with_map_indices({int(k): v for k, v in raw["map_indices"].items()})
    return mapper


def _build_csv(raw: dict[str, Any]) -> CsvSettings:
    fmt = None
    # 明示的な format 指定が無ければ自動判定
    detect = raw.get("detect", not any(k in raw for k in ("encoding", "separator", "newline")))
    if not detect:
        fmt = DelimitedFormat(
            encoding=raw.get("encoding", "UTF-8"),
            separator=raw.get("separator", ";"),
            newline=raw.get("newline", "\r\n"),
        )
        try:
            fmt.validate()
        except DelimitedFormatError as e:
            raise ConfigError(f"csv: {e}") from e
    return CsvSettings(
        format=fmt,
        header_comment=raw.get("header_comment", ""),
        quote_all_fields=raw.get("quote_all_fields", False),
        quote_empty_fields=raw.get("quote_empty_fields", False),
        newline_replacement=raw.get("newline_replacement", "\n"),
    )


def _build_read(raw: dict[str, Any]) -> ReadSettings:
    try:
        modifiers = ModifierList.from_names(raw.get("modifiers", []))
    except KeyError as e:
        raise ConfigError(f"read.modifiers: {e.args[0]}") from e
    columns = raw.get("columns")
    return ReadSettings(
        header_rows=raw.get("header_rows", 0),
        modifiers=modifiers,
        columns={int(k): v for k, v in columns.items()} if columns else None,
        sheet=raw.get("sheet"),
    )


def config_from_dict(data: dict[str, Any]) -> RowbridgeConfig:
    """Validate ``data`` and build a ``RowbridgeConfig`` with defaults applied."""
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    _stringify_keys(data.get("mapper"), "map_indices")
    _stringify_keys(data.get("read"), "columns")
    _validate_config_schema(data)
    return RowbridgeConfig(
        format=_build_format(data.get("format", {})),
        mapper=_build_mapper(data.get("mapper", {})),
        csv=_build_csv(data.get("csv", {})),
        read=_build_read(data.get("read", {})),
        excel=ExcelSettings(sheet_name=data.get("excel", {}).get("sheet_name", "Sheet1")),
    )


def load_config(path: Path | None) -> RowbridgeConfig:
    """Load ``path``; None returns the defaults."""
    if path is None:
        return RowbridgeConfig()
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    return config_from_dict(data)
