"""Exception hierarchy for pydotfiles."""

from typing import Optional


class DotfilesError(Exception):
    """Base exception for all pydotfiles errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        """Initialize the error.

        Args:
            message: Human-readable error message
            path: Logical or filesystem path the error refers to (if any)
        """
        super().__init__(message)
        self.path = path


class DotfilesNotFoundError(DotfilesError):
    """A logical path is absent from the active file source."""


class DotfilesIOError(DotfilesError):
    """Reading or writing a file failed (permissions, disk, races)."""


class DotfilesUnsupportedOperationError(DotfilesError):
    """Operation is not allowed on this source (e.g. writing to an archive)."""


class DotfilesManifestError(DotfilesError):
    """The manifest could not be read, parsed or has an invalid shape."""


class DotfilesPatternError(DotfilesError):
    """An ignore pattern is malformed."""


class DotfilesRepoNotFoundError(DotfilesError):
    """The dotfiles repository or one of its required files is missing."""


class DotfilesArchiveError(DotfilesError):
    """The embedded archive could not be built or loaded."""
