"""Utility functions for pydotfiles."""

import fnmatch
import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from .exceptions import DotfilesPatternError

# =============================================================================
# Constants
# =============================================================================

# Build identity used when no timestamp is available
EMPTY_BUILD_IDENTITY: str = "00000000-00-000000"


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


# =============================================================================
# Glob utilities
# =============================================================================


def check_glob(pattern: str) -> None:
    """Reject glob patterns with an unterminated ``[`` character class.

    Raises:
        DotfilesPatternError: If a ``[`` has no closing ``]``
    """
    i, n = 0, len(pattern)
    while i < n:
        if pattern[i] == "[":
            j = i + 1
            if j < n and pattern[j] == "!":
                j += 1
            # A leading ']' is part of the set
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                raise DotfilesPatternError(
                    f"Invalid glob pattern {pattern!r}: unterminated character "
                    f"class at position {i}",
                    path=pattern,
                )
            i = j
        i += 1


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """Compile a shell-style glob into a case-sensitive regex.

    Supports ``*``, ``?``, ``[seq]`` and ``[!seq]``. There is no ``**`` or
    brace expansion; ``*`` matches any sequence of characters.

    Args:
        pattern: Glob pattern

    Returns:
        Compiled regular expression anchored at both ends

    Raises:
        DotfilesPatternError: If the pattern is malformed
    """
    check_glob(pattern)
    return re.compile(fnmatch.translate(pattern))


# =============================================================================
# Timestamp utilities
# =============================================================================


def format_build_identity(timestamp: Optional[float]) -> str:
    """Format a Unix timestamp as a build identity string.

    The format is ``YYYYMMDD-WW-HHMMSS`` in UTC, where ``WW`` is the ISO week
    number.

    Args:
        timestamp: Unix timestamp (seconds), or None

    Returns:
        Build identity string

    Examples:
        >>> format_build_identity(0)
        '00000000-00-000000'
        >>> format_build_identity(1700000000)
        '20231114-46-221320'
    """
    if not timestamp or timestamp <= 0:
        return EMPTY_BUILD_IDENTITY

    dt = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
    week = dt.isocalendar()[1]
    return f"{dt:%Y%m%d}-{week:02d}-{dt:%H%M%S}"
