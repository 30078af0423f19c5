"""
Cross-reference of snapshot tables against a reachable-address corpus.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from ..addrdb.netaddr import HostKey, parse_host_key
from ..addrdb.peers import AddressTable
from ..errors import InputFileError

log = logging.getLogger("peerstats.reachability")


def host_set(table: AddressTable) -> frozenset[HostKey]:
    return frozenset(record.host_key for record in table)


def normalize_host(line: str) -> HostKey | None:
    """Corpus line to host key; None for blank or unparseable lines."""
    try:
        return parse_host_key(line)
    except ValueError:
        log.debug("Skipping unparseable corpus line %r", line)
        return None


def match_reachable(lines: Iterable[str], tables: Sequence[AddressTable]) -> tuple[int, ...]:
    """
    Stream ``lines`` once and count, per table, the distinct hosts it lists.

    A host repeated in the corpus counts once, so a result never exceeds the
    table's size.
    """

    sets = [host_set(table) for table in tables]
    matched: set[HostKey] = set()
    counts = [0] * len(tables)
    for line in lines:
        key = normalize_host(line)
        if key is None or key in matched:
            continue
        for idx, hosts in enumerate(sets):
            if key in hosts:
                counts[idx] += 1
                matched.add(key)
    return tuple(counts)


def match_corpus_file(path: Path, tables: Sequence[AddressTable]) -> tuple[int, ...]:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            counts = match_reachable(fh, tables)
    except OSError as exc:
        raise InputFileError(path, exc.strerror or str(exc)) from exc
    for table, count in zip(tables, counts):
        log.info("%s table: %d of %d addresses reachable per %s", table.name, count, len(table), path)
    return counts


def reachable_fraction(reachable: int, total: int) -> float | None:
    """Share of reachable records, or None when the table is empty."""
    if total == 0:
        return None
    return reachable / total
