"""
Per-table statistics records.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..addrdb.peers import AddressTable
from . import age
from .age import ONE_DAY, AgeBuckets
from .reachability import reachable_fraction


@dataclass(frozen=True, slots=True)
class StatsResult:
    table: str
    reachable: int
    total: int
    fraction: float | None
    oldest_timestamp: int | None
    oldest_age: int | None
    buckets: AgeBuckets

    @property
    def percentage(self) -> float | None:
        return None if self.fraction is None else self.fraction * 100

    @property
    def oldest_age_days(self) -> int | None:
        return None if self.oldest_age is None else self.oldest_age // ONE_DAY


@dataclass(frozen=True, slots=True)
class StatsReport:
    reference: int
    corpus_timestamp: int
    corpus_path: Path
    new: StatsResult
    tried: StatsResult

    @property
    def results(self) -> tuple[StatsResult, StatsResult]:
        return self.new, self.tried


def aggregate(table: AddressTable, reachable: int, reference: int, buckets: AgeBuckets) -> StatsResult:
    total = len(table)
    if not (0 <= reachable <= total):
        raise ValueError(f"{table.name}: reachable count {reachable} outside 0..{total}")
    if buckets.total != total:
        raise ValueError(f"{table.name}: age buckets hold {buckets.total} records, table has {total}")
    oldest = age.oldest_timestamp(table)
    return StatsResult(
        table=table.name,
        reachable=reachable,
        total=total,
        fraction=reachable_fraction(reachable, total),
        oldest_timestamp=oldest,
        oldest_age=None if oldest is None else reference - oldest,
        buckets=buckets,
    )
