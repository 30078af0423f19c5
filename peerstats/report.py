"""
Rendering of statistics reports into per-table CSV files.
"""

from __future__ import annotations

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path

from .stats.results import StatsReport, StatsResult

HEADER = (
    "Approx_Peerdat_Date",
    "Oldest_IP_Days",
    "Total_IPs",
    "PercentReachable",
    "Age_1",
    "Age_1_5",
    "Age_5_10",
    "Age_10_30",
    "Age_30",
)
NOT_APPLICABLE = "NA"

log = logging.getLogger("peerstats.report")


def format_date(timestamp: int) -> str:
    """``Jan 2 2006`` style, in UTC."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return f"{moment:%b} {moment.day} {moment.year}"


def format_row(reference: int, result: StatsResult) -> list[str]:
    percentage = result.percentage
    oldest_days = result.oldest_age_days
    return [
        format_date(reference),
        NOT_APPLICABLE if oldest_days is None else str(oldest_days),
        str(result.total),
        NOT_APPLICABLE if percentage is None else f"{percentage:.2f}",
        *(str(count) for count in result.buckets.as_tuple()),
    ]


def write_table_stats(path: Path, reference: int, result: StatsResult) -> None:
    with open(path, "w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh, lineterminator="\n")
        writer.writerow(HEADER)
        writer.writerow(format_row(reference, result))


def write_report(
    report: StatsReport,
    output_dir: Path,
    *,
    new_name: str = "new-table-stats.txt",
    tried_name: str = "tried-table-stats.txt",
) -> tuple[Path, Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    new_path = output_dir / new_name
    tried_path = output_dir / tried_name
    write_table_stats(new_path, report.reference, report.new)
    write_table_stats(tried_path, report.reference, report.tried)
    log.info("Wrote %s and %s", new_path, tried_path)
    return new_path, tried_path
