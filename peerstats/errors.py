"""
Shared error types for the peer statistics pipeline.
"""

from __future__ import annotations

from pathlib import Path


class PeerStatsError(Exception):
    """Base class for every failure raised by the pipeline."""


class DecodeError(PeerStatsError):
    """Raised when a peers.dat snapshot cannot be decoded."""

    def __init__(
        self,
        stage: str,
        message: str,
        *,
        table: str | None = None,
        index: int | None = None,
        offset: int | None = None,
    ):
        self.stage = stage
        self.message = message
        self.table = table
        self.index = index
        self.offset = offset
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = self.stage
        if self.table is not None:
            where += f" {self.table}"
        if self.index is not None:
            where += f"[{self.index}]"
        if self.offset is not None:
            where += f" @ byte {self.offset}"
        return f"{where}: {self.message}"


class EmptyTableError(PeerStatsError):
    """Raised when a computation needs records and none are present."""


class LookupRangeError(PeerStatsError):
    """Raised when no corpus timestamp can be selected."""


class InputFileError(PeerStatsError, OSError):
    """Raised when an input path cannot be read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"
