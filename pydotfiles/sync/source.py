"""File sources: uniform byte access to a directory tree or an embedded archive."""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol

from ..archive import Archive
from ..config import FilePaths
from ..exceptions import (
    DotfilesIOError,
    DotfilesNotFoundError,
    DotfilesUnsupportedOperationError,
)
from ..manifest import CONFIG_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileMetadata:
    """Size and modification time of a file in a source."""

    size: int
    """File size in bytes"""

    mtime: Optional[float] = None
    """Last modification time (Unix timestamp), None if the source has none"""


class FileSource(Protocol):
    """Read (and optionally write) files by logical path.

    Logical paths look like ``config/<tool>/<relative_path>`` or a bare
    name such as ``distribution.toml``.
    """

    name: str

    @property
    def writable(self) -> bool: ...

    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> bytes: ...

    def metadata(self, path: str) -> FileMetadata: ...

    def write(self, path: str, data: bytes) -> None: ...


def _check_logical_path(path: str) -> PurePosixPath:
    logical = PurePosixPath(path)
    if not path or logical.is_absolute() or ".." in logical.parts:
        raise DotfilesNotFoundError(f"Invalid logical path: {path!r}", path=path)
    return logical


class FilesystemSource:
    """File source backed by a live directory tree.

    Examples:
        >>> repo = FilesystemSource(Path("~/repos/dotfiles").expanduser())
        >>> repo.exists("config/nvim/init.lua")  # doctest: +SKIP
        True
    """

    def __init__(
        self,
        root: Path,
        config_root: Optional[Path] = None,
        name: str = "filesystem",
    ):
        """Initialize filesystem source.

        Args:
            root: Directory that bare logical paths are resolved against
            config_root: Directory that ``config/...`` paths are resolved
                against (defaults to ``root / "config"``)
            name: Label used in messages (e.g. "home", "repo")
        """
        self.root = root
        if config_root is None:
            config_root = root / CONFIG_PREFIX
        self.config_root = config_root
        self.name = name

    @classmethod
    def for_repo(cls, paths: FilePaths) -> "FilesystemSource":
        return cls(paths.repo_dir, paths.repo_config_root, name="repo")

    @classmethod
    def for_home(cls, paths: FilePaths) -> "FilesystemSource":
        return cls(paths.config_dir, paths.config_dir, name="home")

    @property
    def writable(self) -> bool:
        return True

    def resolve(self, path: str) -> Path:
        """Map a logical path to a filesystem path."""
        logical = _check_logical_path(path)
        if logical.parts[0] == CONFIG_PREFIX and len(logical.parts) > 1:
            return self.config_root.joinpath(*logical.parts[1:])
        return self.root.joinpath(*logical.parts)

    def exists(self, path: str) -> bool:
        try:
            return self.resolve(path).is_file()
        except DotfilesNotFoundError:
            return False

    def read(self, path: str) -> bytes:
        file_path = self.resolve(path)
        try:
            return file_path.read_bytes()
        except FileNotFoundError as e:
            raise DotfilesNotFoundError(
                f"File not found in {self.name}: {path}", path=path
            ) from e
        except IsADirectoryError as e:
            raise DotfilesIOError(
                f"Expected a file but found a directory: {file_path}", path=path
            ) from e
        except OSError as e:
            raise DotfilesIOError(f"Failed to read {file_path}: {e}", path=path) from e

    def metadata(self, path: str) -> FileMetadata:
        file_path = self.resolve(path)
        try:
            stat = file_path.stat()
        except FileNotFoundError as e:
            raise DotfilesNotFoundError(
                f"File not found in {self.name}: {path}", path=path
            ) from e
        except OSError as e:
            raise DotfilesIOError(f"Failed to stat {file_path}: {e}", path=path) from e
        return FileMetadata(size=stat.st_size, mtime=stat.st_mtime)

    def write(self, path: str, data: bytes) -> None:
        file_path = self.resolve(path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(data)
        except OSError as e:
            raise DotfilesIOError(f"Failed to write {file_path}: {e}", path=path) from e
        logger.debug("Wrote %d bytes to %s", len(data), file_path)

    def __repr__(self) -> str:
        return f"FilesystemSource({self.name}: {self.root})"


class EmbeddedSource:
    """Read-only file source backed by an embedded archive."""

    def __init__(self, archive: Archive, name: str = "embedded"):
        self.archive = archive
        self.name = name

    @property
    def writable(self) -> bool:
        return False

    def exists(self, path: str) -> bool:
        return path in self.archive.files

    def read(self, path: str) -> bytes:
        try:
            return self.archive.files[path]
        except KeyError:
            raise DotfilesNotFoundError(
                f"File not found in embedded archive: {path}", path=path
            ) from None

    def metadata(self, path: str) -> FileMetadata:
        # Archives carry no modification times
        return FileMetadata(size=len(self.read(path)))

    def write(self, path: str, data: bytes) -> None:
        raise DotfilesUnsupportedOperationError(
            f"Cannot write {path}: embedded archives are read-only", path=path
        )

    def __repr__(self) -> str:
        return f"EmbeddedSource({self.archive.identity}, {len(self.archive)} files)"
