from __future__ import annotations

from ..models.processing_result import ConversionResult

"""SUMMARY line rendering for the CLI."""


def _number(value: float) -> str:
    # 指数表記を避ける / 整数値は小数点なし
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(result: ConversionResult) -> str:
    """Render the SUMMARY line of one conversion.

    Format:
    SUMMARY rows={rows} header_rows={header_rows} columns={columns}
    elapsed_sec={elapsed} throughput_rps={throughput}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> render_summary_line(ConversionResult.measure(1000, 1, 3, start, end))
        'SUMMARY rows=1000 header_rows=1 columns=3 elapsed_sec=2 throughput_rps=500'
    """
    return (
        f"SUMMARY rows={result.rows} "
        f"header_rows={result.header_rows} "
        f"columns={result.columns} "
        f"elapsed_sec={_number(result.elapsed_seconds)} "
        f"throughput_rps={_number(result.throughput_rows_per_sec)}"
    )
