"""File comparison logic for sync operations."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import DotfilesError
from ..manifest import TrackedEntry
from .ignore import IgnoreMatcher
from .source import FileMetadata, FileSource

logger = logging.getLogger(__name__)


class Classification(str, Enum):
    """How a tracked file on the source side relates to the destination."""

    IN_SYNC = "in_sync"
    """Both sides hold identical content"""

    SOURCE_NEWER = "source_newer"
    """Contents differ; the source wins"""

    DEST_MISSING = "dest_missing"
    """File is absent at the destination"""

    SOURCE_MISSING = "source_missing"
    """Manifest references a file absent from the source"""

    @property
    def needs_copy(self) -> bool:
        return self in (Classification.SOURCE_NEWER, Classification.DEST_MISSING)


@dataclass(frozen=True)
class DiffEntry:
    """Comparison result for one tracked entry."""

    tracked: TrackedEntry
    """Manifest entry this result belongs to"""

    classification: Classification
    """Comparison outcome"""

    ignored: bool = False
    """Whether an ignore pattern excludes the entry from copying"""

    reason: str = ""
    """Human-readable explanation of the classification"""

    error: Optional[DotfilesError] = None
    """Error raised while comparing, if any"""

    @property
    def display_path(self) -> str:
        return self.tracked.display_path


class FileComparator:
    """Classifies tracked entries by comparing a source and a destination.

    Content is authoritative: files of equal size are compared byte for
    byte, so identical files are always in sync regardless of timestamps.
    With ``trust_timestamps=True`` files whose modification times are both
    known and equal are assumed identical without reading them.
    """

    def __init__(
        self,
        ignore: Optional[IgnoreMatcher] = None,
        trust_timestamps: bool = False,
    ):
        """Initialize file comparator.

        Args:
            ignore: Ignore matcher (defaults to one that ignores nothing)
            trust_timestamps: Treat equal modification times as in sync
        """
        self.ignore = ignore or IgnoreMatcher()
        self.trust_timestamps = trust_timestamps

    def compute_diff(
        self,
        entries: Iterable[TrackedEntry],
        source: FileSource,
        destination: FileSource,
    ) -> list[DiffEntry]:
        """Classify every tracked entry, in manifest order.

        Args:
            entries: Tracked entries in declaration order
            source: Source side of the operation
            destination: Destination side of the operation

        Returns:
            List of DiffEntry objects, one per entry, in the same order
        """
        return [self.compare_entry(entry, source, destination) for entry in entries]

    def compare_entry(
        self,
        entry: TrackedEntry,
        source: FileSource,
        destination: FileSource,
    ) -> DiffEntry:
        """Classify a single tracked entry."""
        ignored = self.ignore.is_ignored(entry.display_path)
        error: Optional[DotfilesError] = None
        path = entry.logical_path

        if not destination.exists(path):
            classification = Classification.DEST_MISSING
            reason = f"Missing in {destination.name}"
        elif not source.exists(path):
            classification = Classification.SOURCE_MISSING
            reason = f"Missing in {source.name}"
        else:
            try:
                classification, reason = self._compare_existing_files(
                    path, source, destination
                )
            except DotfilesError as e:
                # The executor surfaces the failure when it copies
                error = e
                classification = Classification.SOURCE_NEWER
                reason = f"Comparison failed: {e}"

        logger.debug(
            "%s: %s (%s)%s",
            entry.display_path,
            classification.value,
            reason,
            " [ignored]" if ignored else "",
        )
        return DiffEntry(
            tracked=entry,
            classification=classification,
            ignored=ignored,
            reason=reason,
            error=error,
        )

    def _compare_existing_files(
        self, path: str, source: FileSource, destination: FileSource
    ) -> tuple[Classification, str]:
        """Compare files that exist on both sides."""
        source_meta = source.metadata(path)
        dest_meta = destination.metadata(path)

        if (
            self.trust_timestamps
            and source_meta.mtime is not None
            and source_meta.mtime == dest_meta.mtime
        ):
            return Classification.IN_SYNC, "Same modification time"

        if source_meta.size != dest_meta.size:
            reason = (
                f"Different sizes ({source_meta.size} vs {dest_meta.size}); "
                f"{self._describe_age(source_meta, dest_meta)}"
            )
            return Classification.SOURCE_NEWER, reason

        if source.read(path) == destination.read(path):
            return Classification.IN_SYNC, "Files are identical"

        return (
            Classification.SOURCE_NEWER,
            f"Contents differ; {self._describe_age(source_meta, dest_meta)}",
        )

    @staticmethod
    def _describe_age(source_meta: FileMetadata, dest_meta: FileMetadata) -> str:
        if source_meta.mtime is None or dest_meta.mtime is None:
            return "no timestamp available, source wins"
        if source_meta.mtime > dest_meta.mtime:
            return "source is newer"
        if source_meta.mtime < dest_meta.mtime:
            return "destination is newer, source wins"
        return "same timestamp, source wins"
