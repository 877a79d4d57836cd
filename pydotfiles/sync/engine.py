"""Core sync engine for executing sync and install operations."""

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..exceptions import DotfilesUnsupportedOperationError
from ..manifest import TrackedEntry
from ..output import OutputFormatter
from ..utils import format_size
from .comparator import Classification, DiffEntry, FileComparator
from .ignore import IgnoreMatcher
from .modes import SyncDirection
from .operations import OutcomeKind, SyncOperations, SyncOutcome, SyncReport
from .source import FileSource

logger = logging.getLogger(__name__)


class SyncEngine:
    """Core sync engine that orchestrates directional file synchronization.

    ``sync`` copies from the home config tree into the repository and
    ``install`` copies from the repository into the home config tree. Both
    use the same diff and apply steps; only the roles of the two sources
    differ.
    """

    def __init__(
        self,
        home: FileSource,
        repo: FileSource,
        ignore: Optional[IgnoreMatcher] = None,
        output: Optional[OutputFormatter] = None,
        trust_timestamps: bool = False,
    ):
        """Initialize sync engine.

        Args:
            home: Source for the home config tree
            repo: Source for the repository (filesystem or embedded)
            ignore: Ignore matcher loaded from .dotignore
            output: Output formatter for displaying progress/status
            trust_timestamps: Treat equal modification times as in sync
        """
        self.home = home
        self.repo = repo
        self.ignore = ignore or IgnoreMatcher()
        self.output = output or OutputFormatter()
        self.comparator = FileComparator(self.ignore, trust_timestamps)

    def sources_for(self, direction: SyncDirection) -> tuple[FileSource, FileSource]:
        """Return (source, destination) for a direction."""
        if direction.source_is_home:
            return self.home, self.repo
        return self.repo, self.home

    def compute_diff(
        self, entries: Sequence[TrackedEntry], direction: SyncDirection
    ) -> list[DiffEntry]:
        """Classify tracked entries for a direction, in manifest order."""
        source, destination = self.sources_for(direction)
        return self.comparator.compute_diff(entries, source, destination)

    def apply(
        self,
        diff_entries: Sequence[DiffEntry],
        source: FileSource,
        destination: FileSource,
        max_workers: int = 1,
    ) -> SyncReport:
        """Apply diff entries, best effort.

        Every entry yields exactly one outcome; a failing entry never stops
        the remaining ones. With ``max_workers > 1`` copies run in a thread
        pool, but outcomes are returned in the order of ``diff_entries``.

        Args:
            diff_entries: Entries produced by compute_diff
            source: Side files are read from
            destination: Side files are written to
            max_workers: Number of parallel workers (default: 1)

        Returns:
            SyncReport with one outcome per entry
        """
        operations = SyncOperations(source, destination)
        start = time.time()

        if max_workers > 1 and len(diff_entries) > 1:
            logger.debug(
                "Applying %d entries with %d workers", len(diff_entries), max_workers
            )
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                outcomes = list(executor.map(operations.apply_entry, diff_entries))
        elif self.output.quiet or self.output.json_output:
            outcomes = [operations.apply_entry(entry) for entry in diff_entries]
        else:
            outcomes = []
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=self.output.console,
                transient=True,
            ) as progress:
                task = progress.add_task("Copying files...", total=len(diff_entries))
                for entry in diff_entries:
                    progress.update(task, description=f"{entry.display_path}")
                    outcomes.append(operations.apply_entry(entry))
                    progress.advance(task)

        logger.debug("Apply took %.2fs", time.time() - start)
        return SyncReport(outcomes)

    def run(
        self,
        entries: Sequence[TrackedEntry],
        direction: SyncDirection,
        dry_run: bool = False,
        max_workers: int = 1,
    ) -> SyncReport:
        """Diff and apply for ``sync`` or ``install``.

        Args:
            entries: Tracked entries in manifest order
            direction: SYNC or INSTALL
            dry_run: If True, only show what would be done
            max_workers: Number of parallel workers for copies

        Returns:
            SyncReport with one outcome per entry

        Raises:
            DotfilesUnsupportedOperationError: If the destination cannot be
                written (e.g. syncing into an embedded archive) or the
                direction does not copy files. Raised before any file is read.
        """
        if not direction.writes:
            raise DotfilesUnsupportedOperationError(
                f"Direction '{direction.value}' does not copy files"
            )

        source, destination = self.sources_for(direction)
        if not destination.writable:
            raise DotfilesUnsupportedOperationError(
                f"Cannot {direction.value}: destination '{destination.name}' "
                "is read-only (embedded archive)"
            )

        self.output.header(direction.heading)
        if dry_run:
            self.output.info("Dry run: No changes will be made")

        diff = self.compute_diff(entries, direction)

        if dry_run:
            report = SyncReport([self._plan_outcome(entry) for entry in diff])
        else:
            report = self.apply(diff, source, destination, max_workers=max_workers)

        self._display_outcomes(report, direction, dry_run)
        self._display_summary(report, dry_run)
        return report

    def sync(
        self,
        entries: Sequence[TrackedEntry],
        dry_run: bool = False,
        max_workers: int = 1,
    ) -> SyncReport:
        """Copy changed files from the home config tree into the repository."""
        return self.run(entries, SyncDirection.SYNC, dry_run, max_workers)

    def install(
        self,
        entries: Sequence[TrackedEntry],
        dry_run: bool = False,
        max_workers: int = 1,
    ) -> SyncReport:
        """Copy changed files from the repository into the home config tree."""
        return self.run(entries, SyncDirection.INSTALL, dry_run, max_workers)

    @staticmethod
    def _plan_outcome(entry: DiffEntry) -> SyncOutcome:
        """Outcome a dry run reports for an entry (nothing is written)."""
        if entry.ignored:
            return SyncOutcome.skipped(entry, "ignored")
        if entry.classification == Classification.IN_SYNC:
            return SyncOutcome.skipped(entry, "in sync")
        if entry.classification == Classification.SOURCE_MISSING:
            return SyncOutcome.skipped(entry, entry.reason)
        return SyncOutcome.skipped(entry, f"would copy ({entry.reason})")

    def _display_outcomes(
        self, report: SyncReport, direction: SyncDirection, dry_run: bool
    ) -> None:
        """Print one line per entry, grouped under each tool."""
        current_tool: Optional[str] = None
        for outcome in report.outcomes:
            tool = outcome.entry.tracked.tool
            if tool != current_tool:
                self.output.info(f"Processing tool: {tool}")
                current_tool = tool

            path = outcome.display_path
            if outcome.kind == OutcomeKind.COPIED:
                self.output.success(f"{direction.verb}: {path}")
            elif outcome.kind == OutcomeKind.FAILED:
                self.output.error(f"Failed: {path}: {outcome.reason}")
            elif outcome.reason == "ignored":
                self.output.warning(f"Ignored by .dotignore: {path}")
            elif dry_run and outcome.entry.classification.needs_copy:
                self.output.modified(f"Would copy: {path} ({outcome.entry.reason})")
            elif outcome.entry.classification == Classification.SOURCE_MISSING:
                self.output.warning(f"Source file not found: {path}")
            else:
                self.output.print(f"  = Unchanged: {path}")

    def _display_summary(self, report: SyncReport, dry_run: bool) -> None:
        """Display sync summary."""
        if self.output.json_output:
            self.output.output_json(report.to_dict())
            return

        title = "Dry run complete" if dry_run else "Summary"
        items = [
            ("Copied", str(report.copied)),
            ("Skipped", str(report.skipped)),
            ("Failed", str(report.failed)),
            ("Transferred", format_size(report.bytes_copied)),
        ]
        self.output.print_summary(title, items)

        if report.failed:
            self.output.error(f"{report.failed} file(s) failed")
        elif not dry_run and report.copied == 0:
            self.output.info("No changes needed - everything is in sync!")
