"""Ignore pattern handling (.dotignore files)."""

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from ..config import IGNORE_FILE_NAME
from ..exceptions import DotfilesIOError, DotfilesPatternError
from ..utils import glob_to_regex

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_IGNORE_CONTENT",
    "IGNORE_FILE_NAME",
    "IgnoreMatcher",
    "create_default_ignore_file",
    "load_ignore_file",
    "parse_ignore_content",
]

DEFAULT_IGNORE_CONTENT = """\
# Add files to ignore when syncing
# Each line is a glob pattern matched against tool/path or the basename
*history
*_history
*id_rsa*
*authorized_keys*
*known_hosts*
*htop
*netrc
*oauth*
*robrc
*token*
*.cert
*.key
*.pem
*.crt
*credentials*
*client_secret*
"""


class IgnoreRule:
    """A single compiled ignore pattern."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        try:
            self._regex: Optional[re.Pattern[str]] = glob_to_regex(pattern)
        except DotfilesPatternError as e:
            # Malformed globs match only themselves
            logger.warning("%s; treating it as a literal name", e)
            self._regex = None

    def matches(self, value: str) -> bool:
        if self._regex is None:
            return value == self.pattern
        return self._regex.match(value) is not None

    def __repr__(self) -> str:
        return f"IgnoreRule({self.pattern!r})"


class IgnoreMatcher:
    """Decides whether a tracked path is excluded from copying.

    A path is ignored if any pattern matches either the whole path
    (``tool/relative_path``) or its final segment. Matching is
    case-sensitive. A matcher without patterns ignores nothing.

    Examples:
        >>> matcher = IgnoreMatcher(["*.key"])
        >>> matcher.is_ignored("ssh/id.key")
        True
        >>> IgnoreMatcher().is_ignored("ssh/id.key")
        False
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None):
        self.rules: tuple[IgnoreRule, ...] = tuple(
            IgnoreRule(pattern) for pattern in (patterns or [])
        )

    @property
    def patterns(self) -> list[str]:
        return [rule.pattern for rule in self.rules]

    def __len__(self) -> int:
        return len(self.rules)

    def matching_rule(self, path: str) -> Optional[IgnoreRule]:
        """Return the first rule that excludes ``path``, if any."""
        basename = path.rstrip("/").rsplit("/", 1)[-1]
        for rule in self.rules:
            if rule.matches(path) or rule.matches(basename):
                return rule
        return None

    def is_ignored(self, path: str) -> bool:
        return self.matching_rule(path) is not None


def parse_ignore_content(content: str) -> list[str]:
    """Extract patterns from ignore file text, skipping comments and blanks."""
    patterns = []
    for line in content.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def load_ignore_file(path: Path) -> IgnoreMatcher:
    """Load an ignore file. A missing file yields an empty matcher.

    Raises:
        DotfilesIOError: If the file exists but cannot be read or decoded
    """
    if not path.exists():
        logger.debug("No ignore file at %s", path)
        return IgnoreMatcher()

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DotfilesIOError(f"Failed to read {path}: {e}", path=str(path)) from e
    except UnicodeDecodeError as e:
        raise DotfilesIOError(
            f"Failed to decode {path} as UTF-8: {e}", path=str(path)
        ) from e

    patterns = parse_ignore_content(content)
    logger.debug("Loaded %d ignore pattern(s) from %s", len(patterns), path)
    return IgnoreMatcher(patterns)


def create_default_ignore_file(path: Path) -> bool:
    """Write the default ignore file unless one already exists.

    Returns:
        True if the file was created
    """
    if path.exists():
        return False
    path.write_text(DEFAULT_IGNORE_CONTENT, encoding="utf-8")
    return True
