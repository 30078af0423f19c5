"""
Statistics stage exports.
"""

from .age import AgeBuckets, approximate_age, bucket_ages, bucket_for_age, oldest_timestamp
from .locator import closest_timestamp, corpus_path, load_timestamps
from .pipeline import compute_stats, run
from .reachability import host_set, match_corpus_file, match_reachable, reachable_fraction
from .results import StatsReport, StatsResult, aggregate

__all__ = [
    "AgeBuckets",
    "StatsReport",
    "StatsResult",
    "aggregate",
    "approximate_age",
    "bucket_ages",
    "bucket_for_age",
    "closest_timestamp",
    "compute_stats",
    "corpus_path",
    "host_set",
    "load_timestamps",
    "match_corpus_file",
    "match_reachable",
    "oldest_timestamp",
    "reachable_fraction",
    "run",
]
