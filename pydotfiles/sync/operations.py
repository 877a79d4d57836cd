"""Per-entry sync operations and their outcomes."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..exceptions import DotfilesError, DotfilesNotFoundError
from .comparator import Classification, DiffEntry
from .source import FileSource

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    """Result of applying one diff entry."""

    COPIED = "copied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """Outcome of applying one diff entry."""

    entry: DiffEntry
    """Diff entry the outcome belongs to"""

    kind: OutcomeKind
    """Copied, skipped or failed"""

    reason: str = ""
    """Why the entry was skipped or failed"""

    error: Optional[DotfilesError] = None
    """Error that caused a failure"""

    bytes_copied: int = 0
    """Number of bytes written for copied entries"""

    @classmethod
    def copied(cls, entry: DiffEntry, size: int) -> "SyncOutcome":
        return cls(entry, OutcomeKind.COPIED, bytes_copied=size)

    @classmethod
    def skipped(cls, entry: DiffEntry, reason: str) -> "SyncOutcome":
        return cls(entry, OutcomeKind.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, entry: DiffEntry, error: DotfilesError) -> "SyncOutcome":
        return cls(entry, OutcomeKind.FAILED, reason=str(error), error=error)

    @property
    def display_path(self) -> str:
        return self.entry.display_path

    def to_dict(self) -> dict:
        return {
            "tool": self.entry.tracked.tool,
            "path": self.entry.tracked.relative_path,
            "classification": self.entry.classification.value,
            "ignored": self.entry.ignored,
            "outcome": self.kind.value,
            "reason": self.reason,
            "bytes_copied": self.bytes_copied,
        }


@dataclass
class SyncReport:
    """Ordered outcomes of one apply pass with aggregated counts."""

    outcomes: list[SyncOutcome] = field(default_factory=list)

    def count(self, kind: OutcomeKind) -> int:
        return sum(1 for outcome in self.outcomes if outcome.kind == kind)

    @property
    def copied(self) -> int:
        return self.count(OutcomeKind.COPIED)

    @property
    def skipped(self) -> int:
        return self.count(OutcomeKind.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(OutcomeKind.FAILED)

    @property
    def bytes_copied(self) -> int:
        """Total bytes written by copied entries."""
        return sum(outcome.bytes_copied for outcome in self.outcomes)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def stats(self) -> dict[str, int]:
        return {
            "copied": self.copied,
            "skipped": self.skipped,
            "failed": self.failed,
        }

    def to_dict(self) -> dict:
        return {
            **self.stats(),
            "bytes_copied": self.bytes_copied,
            "files": [o.to_dict() for o in self.outcomes],
        }


class SyncOperations:
    """Applies single diff entries by copying bytes between sources."""

    def __init__(self, source: FileSource, destination: FileSource):
        """Initialize sync operations.

        Args:
            source: Side files are read from
            destination: Side files are written to
        """
        self.source = source
        self.destination = destination

    def copy_file(self, logical_path: str) -> int:
        """Copy one file from source to destination.

        Returns:
            Number of bytes written

        Raises:
            DotfilesError: If reading or writing fails
        """
        data = self.source.read(logical_path)
        self.destination.write(logical_path, data)
        return len(data)

    def apply_entry(self, entry: DiffEntry) -> SyncOutcome:
        """Apply one diff entry. Never raises for per-entry failures."""
        if entry.ignored:
            return SyncOutcome.skipped(entry, "ignored")

        if entry.classification == Classification.IN_SYNC:
            return SyncOutcome.skipped(entry, "in sync")

        if entry.classification == Classification.SOURCE_MISSING:
            return SyncOutcome.failed(
                entry,
                DotfilesNotFoundError(
                    f"{self.source.name.capitalize()} file not found: "
                    f"{entry.display_path}",
                    path=entry.tracked.logical_path,
                ),
            )

        try:
            size = self.copy_file(entry.tracked.logical_path)
        except DotfilesError as e:
            logger.debug("Copy of %s failed: %s", entry.display_path, e)
            return SyncOutcome.failed(entry, e)

        logger.debug(
            "Copied %s (%d bytes) %s -> %s",
            entry.display_path,
            size,
            self.source.name,
            self.destination.name,
        )
        return SyncOutcome.copied(entry, size)
