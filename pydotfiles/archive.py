"""Embedded archive: an immutable snapshot of the repository's tracked files.

``pydotfiles bundle`` builds the archive from the repository and stores it
as a zip file. Commands run with ``--embedded`` load that file once and read
the manifest, the ignore file and every tracked file from it instead of
from the repository checkout.
"""

import logging
import zipfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from .config import IGNORE_FILE_NAME, MANIFEST_FILE_NAME, FilePaths
from .exceptions import DotfilesArchiveError
from .manifest import Manifest
from .utils import EMPTY_BUILD_IDENTITY, format_build_identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Archive:
    """Immutable mapping of logical path to file content."""

    files: Mapping[str, bytes] = field(default_factory=dict)
    """Logical path -> bytes (read-only view)"""

    identity: str = EMPTY_BUILD_IDENTITY
    """Build identity derived from the newest embedded file"""

    newest_file: Optional[str] = None
    """Logical path of the newest embedded file, if known"""

    def __post_init__(self) -> None:
        # Freeze the contents; later changes to the caller's dict are not seen
        object.__setattr__(self, "files", MappingProxyType(dict(self.files)))

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: object) -> bool:
        return path in self.files

    @property
    def has_manifest(self) -> bool:
        return MANIFEST_FILE_NAME in self.files

    @property
    def tracked_file_count(self) -> int:
        """Number of embedded files excluding the manifest and ignore file."""
        return len(
            [p for p in self.files if p not in (MANIFEST_FILE_NAME, IGNORE_FILE_NAME)]
        )

    def _decode(self, name: str) -> str:
        try:
            return self.files[name].decode("utf-8")
        except UnicodeDecodeError as e:
            raise DotfilesArchiveError(
                f"Embedded {name} is not valid UTF-8: {e}", path=name
            ) from e

    def manifest_text(self) -> str:
        """Return the embedded manifest as text.

        Raises:
            DotfilesArchiveError: If the archive has no manifest or the
                manifest is not UTF-8
        """
        if not self.has_manifest:
            raise DotfilesArchiveError(
                f"Embedded archive does not contain {MANIFEST_FILE_NAME}"
            )
        return self._decode(MANIFEST_FILE_NAME)

    def ignore_text(self) -> Optional[str]:
        """Return the embedded ignore file as text, or None if absent.

        Raises:
            DotfilesArchiveError: If the ignore file is not UTF-8
        """
        if IGNORE_FILE_NAME not in self.files:
            return None
        return self._decode(IGNORE_FILE_NAME)


def build_archive(paths: FilePaths, manifest: Manifest) -> Archive:
    """Snapshot the manifest, ignore file and tracked files of a repository.

    Tracked files missing from the repository are skipped with a warning.

    Args:
        paths: Repository locations
        manifest: Manifest whose entries should be embedded

    Returns:
        Archive instance

    Raises:
        DotfilesArchiveError: If the manifest file cannot be read
    """
    files: dict[str, bytes] = {}
    newest_mtime = 0.0
    newest_file: Optional[str] = None

    def _add(logical: str, path: Path) -> None:
        nonlocal newest_mtime, newest_file
        files[logical] = path.read_bytes()
        mtime = path.stat().st_mtime
        if mtime > newest_mtime:
            newest_mtime = mtime
            newest_file = logical

    try:
        _add(MANIFEST_FILE_NAME, paths.manifest_file)
    except OSError as e:
        raise DotfilesArchiveError(f"Failed to read {paths.manifest_file}: {e}") from e

    if paths.ignore_file.is_file():
        files[IGNORE_FILE_NAME] = paths.ignore_file.read_bytes()

    for entry in manifest:
        file_path = paths.repo_file_path(entry.tool, entry.relative_path)
        if not file_path.is_file():
            logger.warning("File not found, not embedding: %s", file_path)
            continue
        try:
            _add(entry.logical_path, file_path)
        except OSError as e:
            logger.warning("Failed to read %s, not embedding: %s", file_path, e)

    identity = format_build_identity(newest_mtime)
    logger.debug(
        "Built archive with %d file(s), identity %s (newest: %s)",
        len(files),
        identity,
        newest_file,
    )
    return Archive(files=files, identity=identity, newest_file=newest_file)


def write_archive(archive: Archive, path: Path) -> None:
    """Store an archive as a zip file; the identity goes into the zip comment.

    Raises:
        DotfilesArchiveError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.comment = archive.identity.encode("ascii")
            for logical, data in archive.files.items():
                zf.writestr(logical, data)
    except OSError as e:
        raise DotfilesArchiveError(f"Failed to write archive {path}: {e}") from e


def load_archive(path: Path) -> Archive:
    """Load an archive previously written by :func:`write_archive`.

    Raises:
        DotfilesArchiveError: If the file is missing, unreadable, not a zip
            file, or lacks the manifest
    """
    if not path.is_file():
        raise DotfilesArchiveError(
            f"Embedded archive not found: {path} (run 'pydotfiles bundle' first)"
        )

    try:
        with zipfile.ZipFile(path) as zf:
            files = {
                info.filename: zf.read(info)
                for info in zf.infolist()
                if not info.is_dir()
            }
            identity = zf.comment.decode("ascii", errors="replace")
    except (OSError, zipfile.BadZipFile) as e:
        raise DotfilesArchiveError(f"Failed to load archive {path}: {e}") from e

    archive = Archive(files=files, identity=identity or EMPTY_BUILD_IDENTITY)
    if not archive.has_manifest:
        raise DotfilesArchiveError(
            f"Embedded archive {path} does not contain {MANIFEST_FILE_NAME}"
        )
    logger.debug("Loaded archive %s with %d file(s)", path, len(archive))
    return archive
