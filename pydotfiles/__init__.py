"""pydotfiles - keep ~/.config and a dotfiles repository in sync."""

from .archive import Archive, build_archive, load_archive, write_archive
from .config import FilePaths
from .exceptions import (
    DotfilesArchiveError,
    DotfilesError,
    DotfilesIOError,
    DotfilesManifestError,
    DotfilesNotFoundError,
    DotfilesPatternError,
    DotfilesRepoNotFoundError,
    DotfilesUnsupportedOperationError,
)
from .manifest import Manifest, TrackedEntry, load_manifest, parse_manifest

__version__ = "0.1.0"

__all__ = [
    "Archive",
    "FilePaths",
    "Manifest",
    "TrackedEntry",
    "build_archive",
    "load_archive",
    "load_manifest",
    "parse_manifest",
    "write_archive",
    "DotfilesArchiveError",
    "DotfilesError",
    "DotfilesIOError",
    "DotfilesManifestError",
    "DotfilesNotFoundError",
    "DotfilesPatternError",
    "DotfilesRepoNotFoundError",
    "DotfilesUnsupportedOperationError",
]
