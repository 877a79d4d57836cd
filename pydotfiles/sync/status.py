"""Read-only status reporting."""

from collections.abc import Sequence
from typing import Optional

from ..manifest import TrackedEntry
from ..output import OutputFormatter
from .comparator import Classification, DiffEntry, FileComparator
from .ignore import IgnoreMatcher
from .source import FileSource

STATUS_LABELS = {
    Classification.IN_SYNC: "Identical",
    Classification.SOURCE_NEWER: "Modified",
    Classification.DEST_MISSING: "Not installed",
    Classification.SOURCE_MISSING: "Missing in repo",
}


class StatusReporter:
    """Compares the repository (source) with the home tree (destination).

    The comparison runs in the install direction and never writes.
    """

    def __init__(
        self,
        home: FileSource,
        repo: FileSource,
        ignore: Optional[IgnoreMatcher] = None,
        output: Optional[OutputFormatter] = None,
    ):
        self.home = home
        self.repo = repo
        self.comparator = FileComparator(ignore)
        self.output = output or OutputFormatter()

    def collect(self, entries: Sequence[TrackedEntry]) -> list[DiffEntry]:
        return self.comparator.compute_diff(entries, self.repo, self.home)

    @staticmethod
    def to_rows(diff: Sequence[DiffEntry]) -> list[dict]:
        return [
            {
                "tool": entry.tracked.tool,
                "path": entry.tracked.relative_path,
                "status": (
                    "Error" if entry.error else STATUS_LABELS[entry.classification]
                ),
                "classification": entry.classification.value,
                "ignored": entry.ignored,
                "reason": entry.reason,
                "error": str(entry.error) if entry.error else None,
            }
            for entry in diff
        ]

    def report(self, entries: Sequence[TrackedEntry]) -> list[DiffEntry]:
        """Render the status table and return the underlying diff.

        Entries whose comparison failed are listed as "Error" and each
        failure is printed with its tool, path and reason.
        """
        diff = self.collect(entries)
        rows = self.to_rows(diff)
        errors = [entry for entry in diff if entry.error is not None]

        if self.output.json_output:
            self.output.output_json(rows)
        else:
            self.output.header("Checking dotfiles status...")
            for row in rows:
                row["ignored"] = "ignored" if row["ignored"] else ""
            self.output.output_table(
                rows,
                ["tool", "path", "status", "ignored"],
                {"tool": "Tool", "path": "File", "status": "Status", "ignored": ""},
            )

            counts = {label: 0 for label in STATUS_LABELS.values()}
            for entry in diff:
                if entry.error is None:
                    counts[STATUS_LABELS[entry.classification]] += 1
            ignored = sum(1 for entry in diff if entry.ignored)
            items = [(label, str(count)) for label, count in counts.items()]
            items.append(("Ignored", str(ignored)))
            items.append(("Errors", str(len(errors))))
            self.output.print_summary("Summary", items)

        for entry in errors:
            self.output.error(f"Failed to compare {entry.display_path}: {entry.error}")
        return diff
