"""Unit tests for utility functions."""

import re

import pytest

from pydotfiles.exceptions import DotfilesPatternError
from pydotfiles.utils import (
    EMPTY_BUILD_IDENTITY,
    check_glob,
    format_build_identity,
    format_size,
    glob_to_regex,
)


def matches(pattern, name):
    return glob_to_regex(pattern).match(name) is not None


class TestFormatSize:
    """Tests for format_size function."""

    def test_bytes(self):
        assert format_size(0) == "0 B"
        assert format_size(1023) == "1023 B"

    def test_kilobytes(self):
        assert format_size(1024) == "1.0 KB"
        assert format_size(1536) == "1.5 KB"

    def test_megabytes_and_gigabytes(self):
        assert format_size(5 * 1024 * 1024) == "5.0 MB"
        assert format_size(2 * 1024 * 1024 * 1024) == "2.0 GB"


class TestGlobToRegex:
    """Tests for glob_to_regex function."""

    def test_compiles_to_regex(self):
        """Test that glob pattern compiles to regex."""
        regex = glob_to_regex("*.txt")
        assert isinstance(regex, re.Pattern)
        assert regex.match("file.txt") is not None
        assert regex.match("file.py") is None

    def test_asterisk_matches_any_sequence(self):
        """Test that * matches any sequence of characters."""
        assert matches("*.key", "id.key") is True
        assert matches("*.key", "id.pub") is False
        assert matches("*history", ".zsh_history") is True
        assert matches("*token*", "github_token.txt") is True

    def test_asterisk_crosses_path_separators(self):
        """Test that * is not limited to a single path segment."""
        assert matches("ssh/*", "ssh/keys/id.key") is True

    def test_question_mark_matches_single_char(self):
        """Test that ? matches exactly one character."""
        assert matches("file?.txt", "file1.txt") is True
        assert matches("file?.txt", "file12.txt") is False

    def test_bracket_matches_character_set(self):
        """Test that [seq] and [!seq] match character sets."""
        assert matches("[abc].txt", "a.txt") is True
        assert matches("[abc].txt", "d.txt") is False
        assert matches("[!abc].txt", "d.txt") is True

    def test_case_sensitivity(self):
        """Test that glob matching is case-sensitive."""
        assert matches("*.KEY", "id.KEY") is True
        assert matches("*.KEY", "id.key") is False

    def test_no_brace_expansion(self):
        """Test that braces are matched literally."""
        assert matches("*.{key,pem}", "id.key") is False
        assert matches("*.{key,pem}", "id.{key,pem}") is True

    def test_unterminated_bracket_rejected(self):
        """Test that an unclosed character class is a pattern error."""
        with pytest.raises(DotfilesPatternError, match="unterminated"):
            glob_to_regex("bad[pattern")


class TestCheckGlob:
    """Tests for check_glob function."""

    @pytest.mark.parametrize(
        "pattern", ["*.key", "[abc].txt", "[!abc]", "[]]x", "[!]]", "plain"]
    )
    def test_valid_patterns(self, pattern):
        check_glob(pattern)

    @pytest.mark.parametrize("pattern", ["[abc", "x[", "[!]", "ok[a]then[b"])
    def test_unterminated_class(self, pattern):
        with pytest.raises(DotfilesPatternError):
            check_glob(pattern)


class TestFormatBuildIdentity:
    """Tests for format_build_identity function."""

    def test_known_timestamp(self):
        """Test formatting YYYYMMDD-WW-HHMMSS in UTC."""
        assert format_build_identity(1700000000) == "20231114-46-221320"

    def test_iso_week_at_year_start(self):
        """Test that the ISO week is used (Jan 1 2021 is in week 53)."""
        # 2021-01-01 00:00:00 UTC
        assert format_build_identity(1609459200) == "20210101-53-000000"

    def test_missing_timestamp(self):
        """Test the placeholder identity for missing timestamps."""
        assert format_build_identity(None) == EMPTY_BUILD_IDENTITY
        assert format_build_identity(0) == "00000000-00-000000"
