"""
End-to-end statistics run over one decoded snapshot.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..addrdb.peers import PeerDatabase, load_peers_db
from ..config import StatsConfig
from .age import approximate_age, bucket_table
from .locator import locate_corpus
from .reachability import match_corpus_file
from .results import StatsReport, aggregate

log = logging.getLogger("peerstats.pipeline")


def compute_stats(db: PeerDatabase, corpus_dir: Path, timestamps_path: Path) -> StatsReport:
    reference = approximate_age(db)
    corpus_ts, corpus = locate_corpus(corpus_dir, timestamps_path, reference)
    reachable_new, reachable_tried = match_corpus_file(corpus, db.tables)
    new = aggregate(db.new, reachable_new, reference, bucket_table(db.new, reference))
    tried = aggregate(db.tried, reachable_tried, reference, bucket_table(db.tried, reference))
    return StatsReport(
        reference=reference,
        corpus_timestamp=corpus_ts,
        corpus_path=corpus,
        new=new,
        tried=tried,
    )


def run(config: StatsConfig) -> StatsReport:
    """Decode the configured snapshot and compute its statistics."""
    inputs = config.input
    db = load_peers_db(inputs.peers_file, networks=config.decoder.networks)
    report = compute_stats(db, inputs.corpus_dir, inputs.timestamps_file)
    for result in report.results:
        log.debug("%s table result: %s", result.table, result)
    return report
