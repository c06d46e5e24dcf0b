from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Conversion result model used for the CLI SUMMARY line."""


@dataclass(frozen=True)
class ConversionResult:
    """Aggregated metrics of one CLI run.

    Attributes:
        rows: Data rows rendered or read
        header_rows: Leading rows passed through as header
        columns: Column count of the widest row
        start_time / end_time: Wall clock bounds (UTC)
        elapsed_seconds: end - start
        throughput_rows_per_sec: rows / elapsed
    """
    rows: int
    header_rows: int
    columns: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float

    @staticmethod
    def measure(rows: int, header_rows: int, columns: int, start_time: datetime, end_time: datetime) -> ConversionResult:
        elapsed = max((end_time - start_time).total_seconds(), 0.0)
        throughput = rows / elapsed if elapsed > 0 else 0.0
        return ConversionResult(
            rows=rows,
            header_rows=header_rows,
            columns=columns,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=round(elapsed, 3),
            throughput_rows_per_sec=round(throughput, 1),
        )
