"""Sync engine for pydotfiles - diff and copy tracked files between trees."""

from .comparator import Classification, DiffEntry, FileComparator
from .engine import SyncEngine
from .ignore import (
    DEFAULT_IGNORE_CONTENT,
    IGNORE_FILE_NAME,
    IgnoreMatcher,
    create_default_ignore_file,
    load_ignore_file,
    parse_ignore_content,
)
from .modes import SyncDirection
from .operations import OutcomeKind, SyncOperations, SyncOutcome, SyncReport
from .source import EmbeddedSource, FileMetadata, FileSource, FilesystemSource
from .status import STATUS_LABELS, StatusReporter

__all__ = [
    "SyncEngine",
    "SyncDirection",
    "SyncOperations",
    "SyncOutcome",
    "SyncReport",
    "OutcomeKind",
    "FileComparator",
    "Classification",
    "DiffEntry",
    "FileSource",
    "FileMetadata",
    "FilesystemSource",
    "EmbeddedSource",
    "StatusReporter",
    "STATUS_LABELS",
    "IgnoreMatcher",
    "IGNORE_FILE_NAME",
    "DEFAULT_IGNORE_CONTENT",
    "create_default_ignore_file",
    "load_ignore_file",
    "parse_ignore_content",
]
