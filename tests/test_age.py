import pytest

from peerstats.errors import EmptyTableError
from peerstats.addrdb import decode_peers_db
from peerstats.stats.age import (
    FIVE_DAYS,
    ONE_DAY,
    TEN_DAYS,
    THIRTY_DAYS,
    AgeBuckets,
    approximate_age,
    bucket_ages,
    bucket_for_age,
    bucket_table,
    oldest_timestamp,
)

from snapshot_factory import encode_snapshot, simple_snapshot


@pytest.mark.parametrize(
    ("age", "bucket"),
    [
        (-50, "le_1d"),
        (0, "le_1d"),
        (ONE_DAY, "le_1d"),
        (ONE_DAY + 1, "d1_5"),
        (FIVE_DAYS - 1, "d1_5"),
        (FIVE_DAYS, "d5_10"),
        (TEN_DAYS - 1, "d5_10"),
        (TEN_DAYS, "d10_30"),
        (THIRTY_DAYS - 1, "d10_30"),
        (THIRTY_DAYS, "ge_30d"),
        (365 * ONE_DAY, "ge_30d"),
    ],
)
def test_bucket_boundaries(age: int, bucket: str) -> None:
    assert bucket_for_age(age) == bucket


def test_recent_records_share_first_bucket() -> None:
    buckets = bucket_ages([90, 95, 99], 100)
    assert buckets == AgeBuckets(le_1d=3)


def test_bucket_total_matches_record_count() -> None:
    reference = 100 * ONE_DAY
    timestamps = [reference - age for age in range(0, 60 * ONE_DAY, 7919)]
    buckets = bucket_ages(timestamps, reference)
    assert buckets.total == len(timestamps)
    assert all(count > 0 for count in buckets.as_tuple())


def test_approximate_age_and_oldest() -> None:
    db = decode_peers_db(simple_snapshot([("1.1.1.1", 500), ("2.2.2.2", 900)], [("3.3.3.3", 700)]))
    assert approximate_age(db) == 900
    assert oldest_timestamp(db.new) == 500
    assert oldest_timestamp(db.tried) == 700
    assert bucket_table(db.new, 900) == AgeBuckets(le_1d=2)


def test_approximate_age_uses_tried_table() -> None:
    db = decode_peers_db(simple_snapshot([], [("3.3.3.3", 1234)]))
    assert approximate_age(db) == 1234
    assert oldest_timestamp(db.new) is None


def test_empty_database_has_no_age() -> None:
    db = decode_peers_db(encode_snapshot([], []))
    with pytest.raises(EmptyTableError):
        approximate_age(db)
