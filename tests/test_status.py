"""Tests for the read-only status report."""

from unittest.mock import Mock, patch

import pytest
from conftest import write_file

from pydotfiles.exceptions import DotfilesIOError
from pydotfiles.manifest import TrackedEntry
from pydotfiles.output import OutputFormatter
from pydotfiles.sync.comparator import Classification
from pydotfiles.sync.ignore import IgnoreMatcher
from pydotfiles.sync.source import FilesystemSource
from pydotfiles.sync.status import STATUS_LABELS, StatusReporter

ENTRIES = [
    TrackedEntry("zsh", ".zshrc"),
    TrackedEntry("nvim", "init.lua"),
    TrackedEntry("git", "config"),
    TrackedEntry("ssh", "id.key"),
]


@pytest.fixture
def trees(paths):
    """zsh identical, nvim modified, git not installed, ssh only at home."""
    write_file(paths.repo_file_path("zsh", ".zshrc"), "same")
    write_file(paths.config_file_path("zsh", ".zshrc"), "same")
    write_file(paths.repo_file_path("nvim", "init.lua"), "repo")
    write_file(paths.config_file_path("nvim", "init.lua"), "home")
    write_file(paths.repo_file_path("git", "config"), "[user]")
    write_file(paths.config_file_path("ssh", "id.key"), "secret")
    return paths


def make_reporter(paths, output):
    return StatusReporter(
        FilesystemSource.for_home(paths),
        FilesystemSource.for_repo(paths),
        IgnoreMatcher(["*.key"]),
        output,
    )


class TestStatusReporter:
    """Tests for StatusReporter."""

    def test_collect_classifies_in_manifest_order(self, trees):
        reporter = make_reporter(trees, OutputFormatter(quiet=True))

        diff = reporter.collect(ENTRIES)

        assert [d.tracked for d in diff] == ENTRIES
        assert [d.classification for d in diff] == [
            Classification.IN_SYNC,
            Classification.SOURCE_NEWER,
            Classification.DEST_MISSING,
            Classification.SOURCE_MISSING,
        ]
        assert [d.ignored for d in diff] == [False, False, False, True]

    def test_labels(self, trees):
        reporter = make_reporter(trees, OutputFormatter(quiet=True))

        rows = reporter.to_rows(reporter.collect(ENTRIES))

        assert [row["status"] for row in rows] == [
            "Identical",
            "Modified",
            "Not installed",
            "Missing in repo",
        ]
        assert set(STATUS_LABELS) == set(Classification)

    def test_report_never_writes(self, trees):
        reporter = make_reporter(trees, OutputFormatter(quiet=True))

        reporter.report(ENTRIES)

        assert not trees.config_file_path("git", "config").exists()
        assert not trees.repo_file_path("ssh", "id.key").exists()
        assert trees.config_file_path("nvim", "init.lua").read_text() == "home"

    def test_json_output_emits_rows(self, trees):
        output = Mock(spec=OutputFormatter)
        output.json_output = True
        reporter = make_reporter(trees, output)

        reporter.report(ENTRIES)

        rows = output.output_json.call_args[0][0]
        assert rows[0] == {
            "tool": "zsh",
            "path": ".zshrc",
            "status": "Identical",
            "classification": "in_sync",
            "ignored": False,
            "reason": "Files are identical",
            "error": None,
        }
        assert rows[3]["ignored"] is True
        output.output_table.assert_not_called()

    def test_text_output_table_and_summary(self, trees):
        output = Mock(spec=OutputFormatter)
        output.json_output = False
        reporter = make_reporter(trees, output)

        reporter.report(ENTRIES)

        rows, columns, headers = output.output_table.call_args[0]
        assert columns == ["tool", "path", "status", "ignored"]
        assert headers["path"] == "File"
        assert rows[3]["ignored"] == "ignored"
        title, items = output.print_summary.call_args[0]
        assert title == "Summary"
        assert ("Identical", "1") in items
        assert ("Ignored", "1") in items
        assert ("Errors", "0") in items

    def test_comparison_error_is_reported(self, trees):
        """A read failure shows as Error with its reason, not as Modified."""
        output = Mock(spec=OutputFormatter)
        output.json_output = False
        reporter = make_reporter(trees, output)
        real_read = reporter.home.read

        def failing_read(path):
            if path == "config/nvim/init.lua":
                raise DotfilesIOError("Permission denied", path=path)
            return real_read(path)

        with patch.object(reporter.home, "read", side_effect=failing_read):
            diff = reporter.report(ENTRIES)

        nvim = diff[1]
        assert isinstance(nvim.error, DotfilesIOError)
        assert "Permission denied" in nvim.reason
        rows = reporter.to_rows(diff)
        assert rows[1]["status"] == "Error"
        assert rows[1]["error"] == "Permission denied"
        output.error.assert_any_call(
            "Failed to compare nvim/init.lua: Permission denied"
        )
        title, items = output.print_summary.call_args[0]
        assert ("Errors", "1") in items
        assert ("Modified", "0") in items
        assert ("Identical", "1") in items
