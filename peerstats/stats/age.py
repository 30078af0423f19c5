"""
Snapshot age estimation and per-record age bucketing.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from ..addrdb.peers import AddressTable, PeerDatabase
from ..errors import EmptyTableError

ONE_DAY = 24 * 60 * 60
FIVE_DAYS = 5 * ONE_DAY
TEN_DAYS = 10 * ONE_DAY
THIRTY_DAYS = 30 * ONE_DAY

BUCKET_NAMES = ("le_1d", "d1_5", "d5_10", "d10_30", "ge_30d")

log = logging.getLogger("peerstats.age")


@dataclass(frozen=True, slots=True)
class AgeBuckets:
    le_1d: int = 0
    d1_5: int = 0
    d5_10: int = 0
    d10_30: int = 0
    ge_30d: int = 0

    @property
    def total(self) -> int:
        return self.le_1d + self.d1_5 + self.d5_10 + self.d10_30 + self.ge_30d

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        return self.le_1d, self.d1_5, self.d5_10, self.d10_30, self.ge_30d


def approximate_age(db: PeerDatabase) -> int:
    """
    Guess when the snapshot was written: the newest last-seen time it holds.

    Nodes refresh the timestamp of peers they talk to, so the most recent entry
    trails the save time closely.
    """

    newest = max((record.timestamp for table in db.tables for record in table), default=None)
    if newest is None:
        raise EmptyTableError("Snapshot has no address records; its age cannot be estimated")
    log.info("Approximate snapshot age: %d", newest)
    return newest


def oldest_timestamp(table: AddressTable) -> int | None:
    return min((record.timestamp for record in table), default=None)


def bucket_for_age(age: int) -> str:
    # The first bucket is closed on the right, the rest are half-open.
    if age <= ONE_DAY:
        return "le_1d"
    if age < FIVE_DAYS:
        return "d1_5"
    if age < TEN_DAYS:
        return "d5_10"
    if age < THIRTY_DAYS:
        return "d10_30"
    return "ge_30d"


def bucket_ages(timestamps: Iterable[int], reference: int) -> AgeBuckets:
    counts = Counter(bucket_for_age(reference - ts) for ts in timestamps)
    return AgeBuckets(**{name: counts[name] for name in BUCKET_NAMES})


def bucket_table(table: AddressTable, reference: int) -> AgeBuckets:
    return bucket_ages(table.timestamps(), reference)
