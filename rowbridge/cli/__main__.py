from __future__ import annotations

import argparse
import importlib
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..config.loader import ConfigError, load_config
from ..delimited.format import DelimitedFormatError
from ..delimited.reader import CsvReader
from ..delimited.renderer import CsvFormat, CsvRenderer
from ..excel.reader import SheetNotFoundError, read_sheet_rows
from ..excel.renderer import ExcelRenderer
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..markup.renderer import HtmlRenderer
from ..models.config_models import RowbridgeConfig
from ..models.error_record import ErrorRecord
from ..models.processing_result import ConversionResult
from ..services.introspect import SchemaContractError, is_record_type
from ..services.progress import RowProgress
from ..services.reader import IndexBoundsError, RowsReader, UnmappedFieldError, read
from ..services.renderer import TableRenderer, render
from ..services.scanner import ScanError
from ..services.summary import render_summary_line

"""CLI entrypoint.

Subcommands:
- inspect SRC: print the first rows of a table file
- convert SRC DEST: copy raw rows between csv / xlsx / html
- validate SRC --schema module:Class [--output DEST]: read every row into
  the dataclass, reporting failures to the error log

Exit codes: 0 success, 1 fatal (config, I/O, schema contract), 2 data error.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_DATA_ERROR = 2

CSV_SUFFIXES = {".csv", ".tsv", ".txt"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
HTML_SUFFIXES = {".html", ".htm"}


class UnsupportedFormatError(ValueError):
    pass


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="rowbridge", description="Typed records <-> csv / xlsx / html tables")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    ins = sub.add_parser("inspect", help="Print the first rows of a table file")
    ins.add_argument("source", type=Path)
    ins.add_argument("--rows", type=int, default=5, help="Number of rows to print")

    conv = sub.add_parser("convert", help="Convert raw rows between formats")
    conv.add_argument("source", type=Path)
    conv.add_argument("destination", type=Path)

    val = sub.add_parser("validate", help="Read rows into a dataclass schema")
    val.add_argument("source", type=Path)
    val.add_argument("--schema", required=True, help="Dataclass as module:ClassName")
    val.add_argument("--output", type=Path, default=None, help="Render the parsed records to this file")
    return p.parse_args(argv)


def _source_rows(path: Path, cfg: RowbridgeConfig) -> list[list[str] | None]:
    if not path.exists():
        raise FileNotFoundError(f"source not found: {path}")
    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        reader = CsvReader.from_file(
            path,
            format=cfg.csv.format,
            newline_replacement=cfg.csv.newline_replacement,
            modifiers=cfg.read.modifiers,
            config=cfg.format,
        )
        return reader.rows
    if suffix in EXCEL_SUFFIXES:
        _, rows = read_sheet_rows(path, cfg.read.sheet, cfg.format)
        return cfg.read.modifiers.modify(rows)
    raise UnsupportedFormatError(f"unsupported source format: {path.suffix or path.name}")


def _make_renderer(path: Path, cfg: RowbridgeConfig) -> TableRenderer:
    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        fmt = CsvFormat(
            header_comment=cfg.csv.header_comment,
            quote_all_fields=cfg.csv.quote_all_fields,
            quote_empty_fields=cfg.csv.quote_empty_fields,
        )
        renderer = CsvRenderer(cfg.format, fmt)
        if cfg.csv.format is not None:
            renderer.with_format(cfg.csv.format)
        return renderer
    if suffix in EXCEL_SUFFIXES:
        return ExcelRenderer(cfg.excel.sheet_name, cfg.format)
    if suffix in HTML_SUFFIXES:
        return HtmlRenderer(cfg.format)
    raise UnsupportedFormatError(f"unsupported destination format: {path.suffix or path.name}")


def _import_schema(spec: str) -> type:
    module_name, _, class_name = spec.partition(":")
    if not module_name or not class_name:
        raise SchemaContractError(f"schema must be given as module:ClassName, got {spec!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SchemaContractError(f"cannot import schema module {module_name!r}: {e}") from e
    schema = getattr(module, class_name, None)
    if not is_record_type(schema):
        raise SchemaContractError(f"{spec} is not a dataclass")
    return schema


def _inspect(args: argparse.Namespace, cfg: RowbridgeConfig) -> int:
    rows = _source_rows(args.source, cfg)
    print(f"FILE: {args.source.name} rows={len(rows)}")
    shown = 0
    for i, row in enumerate(rows):
        if shown >= args.rows:
            break
        if row is None:
            continue
        print(f"  [{i}] {row}")
        shown += 1
    return EXIT_SUCCESS_ALL


def _convert(args: argparse.Namespace, cfg: RowbridgeConfig, logger: Any) -> tuple[int, ConversionResult]:
    start = datetime.now(UTC)
    rows = [r for r in _source_rows(args.source, cfg) if r is not None]
    renderer = _make_renderer(args.destination, cfg)
    header_count = min(cfg.read.header_rows, len(rows))
    for header in rows[:header_count]:
        renderer.render_header_row(header)
    data_rows = rows[header_count:]
    with RowProgress(len(data_rows), description=args.source.name) as progress:
        for row in data_rows:
            renderer.render_row(row)
            progress.advance()
    renderer.write_result_file(args.destination)
    logger.info(f"wrote {args.destination} ({renderer.mime_type})")
    columns = max((len(r) for r in rows), default=0)
    result = ConversionResult.measure(len(data_rows), header_count, columns, start, datetime.now(UTC))
    return EXIT_SUCCESS_ALL, result


def _validate(args: argparse.Namespace, cfg: RowbridgeConfig, logger: Any) -> tuple[int, ConversionResult | None]:
    start = datetime.now(UTC)
    schema = _import_schema(args.schema)
    rows = _source_rows(args.source, cfg)
    reader = RowsReader(rows, cfg.read.columns, tag=cfg.mapper.tag, config=cfg.format, mapper=cfg.mapper)
    errors = ErrorLogBuffer()
    try:
        result = read(reader, schema, cfg.read.header_rows)
    except (ScanError, IndexBoundsError) as e:
        if isinstance(e, ScanError):
            column, error_type = e.column, "SCAN_ERROR"
        else:
            column, error_type = (e.index if e.kind == "column" else None), "INDEX_OUT_OF_RANGE"
        errors.append(ErrorRecord.create(
            args.source.name,
            e.row if e.row is not None else -1,
            column if column is not None else -1,
            error_type,
            str(e),
        ))
        log_path = errors.flush()
        logger.error(f"validate: {e} (error log: {log_path})")
        return EXIT_DATA_ERROR, None

    logger.info(f"validated {len(result.records)} records of {schema.__qualname__}")
    if args.output is not None:
        renderer = _make_renderer(args.output, cfg)
        render(renderer, result.records, mapper=cfg.mapper, record_type=schema)
        renderer.write_result_file(args.output)
        logger.info(f"wrote {args.output} ({renderer.mime_type})")
    columns = len(cfg.read.columns) if cfg.read.columns else max((len(r or []) for r in rows), default=0)
    return EXIT_SUCCESS_ALL, ConversionResult.measure(
        len(result.records), len(result.header_rows), columns, start, datetime.now(UTC)
    )


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む (テストで main([]) 等を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        if args.command == "inspect":
            return _inspect(args, cfg)
        if args.command == "convert":
            code, result = _convert(args, cfg, logger)
        else:
            code, result = _validate(args, cfg, logger)
    except (FileNotFoundError, UnsupportedFormatError, SheetNotFoundError, DelimitedFormatError) as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL
    except (SchemaContractError, UnmappedFieldError) as e:
        logger.error(f"{args.command}: contract: {e}")
        return EXIT_FATAL
    except UnicodeDecodeError as e:
        logger.error(f"{args.command}: cannot decode {args.source}: {e}")
        return EXIT_FATAL

    if result is not None:
        # log_summary が "SUMMARY " を付与するので接頭辞を除く
        log_summary(render_summary_line(result)[len("SUMMARY "):])
    return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
