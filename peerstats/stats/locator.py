"""
Selection of the reachability corpus snapshot closest to a given time.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ..errors import InputFileError, LookupRangeError

log = logging.getLogger("peerstats.locator")


def closest_timestamp(candidates: Sequence[int], target: int) -> int:
    """
    Return the member of ascending ``candidates`` nearest to ``target``.

    Ties between two neighbours go to the earlier one.
    """

    if not candidates:
        raise LookupRangeError("No corpus timestamps to choose from")
    low, high = 0, len(candidates) - 1
    if target <= candidates[low]:
        return candidates[low]
    if target >= candidates[high]:
        return candidates[high]
    # candidates[low] < target < candidates[high] holds from here on.
    while high - low > 1:
        mid = (low + high) // 2
        value = candidates[mid]
        if value == target:
            return value
        if target < value:
            high = mid
        else:
            low = mid
    if target - candidates[low] <= candidates[high] - target:
        return candidates[low]
    return candidates[high]


def load_timestamps(path: Path) -> list[int]:
    """Read the ascending list of available corpus timestamps, one per line."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            lines = fh.readlines()
    except UnicodeDecodeError as exc:
        raise LookupRangeError(f"{path}: not UTF-8 text at byte {exc.start}") from exc
    except OSError as exc:
        raise InputFileError(path, exc.strerror or str(exc)) from exc

    timestamps: list[int] = []
    for lineno, line in enumerate(lines, start=1):
        text = line.strip()
        if not text:
            continue
        try:
            value = int(text)
        except ValueError as exc:
            raise LookupRangeError(f"{path}:{lineno}: not a timestamp: {text!r}") from exc
        if timestamps and value < timestamps[-1]:
            raise LookupRangeError(f"{path}:{lineno}: timestamps are not ascending")
        timestamps.append(value)
    if not timestamps:
        raise LookupRangeError(f"{path} lists no timestamps")
    return timestamps


def corpus_path(directory: Path, timestamp: int) -> Path:
    return Path(directory) / f"{timestamp}.txt"


def locate_corpus(directory: Path, timestamps_path: Path, target: int) -> tuple[int, Path]:
    chosen = closest_timestamp(load_timestamps(timestamps_path), target)
    log.info("Closest corpus timestamp to %d: %d (off by %ds)", target, chosen, abs(chosen - target))
    return chosen, corpus_path(directory, chosen)
