"""Manifest (distribution.toml) model, parser and writer.

The manifest maps tool names to the files tracked for each tool::

    [nvim]
    files = ["init.lua", "lua/plugins.lua"]

    [zsh]
    files = [".zshrc"]

Tool order and file order are preserved because they determine the order
in which entries are reported.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional

import tomli_w

from .exceptions import DotfilesManifestError, DotfilesNotFoundError

logger = logging.getLogger(__name__)

# Logical prefix under which tracked files live in both trees
CONFIG_PREFIX = "config"


@dataclass(frozen=True)
class TrackedEntry:
    """One (tool, relative_path) pair declared in the manifest."""

    tool: str
    """Tool name (subdirectory under the config roots)"""

    relative_path: str
    """Path of the file relative to the tool directory"""

    @property
    def logical_path(self) -> str:
        """Path used to address the file in a file source."""
        return f"{CONFIG_PREFIX}/{self.tool}/{self.relative_path}"

    @property
    def display_path(self) -> str:
        """Path shown to the user and matched against ignore patterns."""
        return f"{self.tool}/{self.relative_path}"


@dataclass
class Manifest:
    """Ordered mapping of tool name to tracked files."""

    tools: dict[str, list[str]] = field(default_factory=dict)
    """Tool name -> ordered list of relative file paths"""

    metadata: dict[str, Any] = field(default_factory=dict)
    """Sections whose name starts with an underscore, kept verbatim"""

    @property
    def entries(self) -> list[TrackedEntry]:
        """All tracked entries in declaration order."""
        return list(self)

    def __iter__(self) -> Iterator[TrackedEntry]:
        for tool, files in self.tools.items():
            for file in files:
                yield TrackedEntry(tool, file)

    def __len__(self) -> int:
        return sum(len(files) for files in self.tools.values())

    def __contains__(self, entry: object) -> bool:
        if not isinstance(entry, TrackedEntry):
            return False
        return entry.relative_path in self.tools.get(entry.tool, [])

    def add(self, tool: str, file: str) -> bool:
        """Track a file, creating the tool section if needed.

        Args:
            tool: Tool name
            file: Relative path of the file

        Returns:
            True if the entry was added, False if it was already tracked
        """
        files = self.tools.setdefault(tool, [])
        if file in files:
            return False
        files.append(file)
        return True

    def remove(self, tool: str, file: str) -> None:
        """Stop tracking a file. The tool section is kept even when empty.

        Raises:
            DotfilesManifestError: If the tool is not in the manifest
            DotfilesNotFoundError: If the file is not tracked for the tool
        """
        if tool not in self.tools:
            raise DotfilesManifestError(f"Tool '{tool}' not found")
        files = self.tools[tool]
        if file not in files:
            raise DotfilesNotFoundError(
                f"File '{file}' is not tracked for tool '{tool}'",
                path=f"{tool}/{file}",
            )
        files.remove(file)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.metadata)
        for tool, files in self.tools.items():
            data[tool] = {"files": list(files)}
        return data


def _validate_relative_path(tool: str, file: str) -> None:
    parts = file.split("/")
    if not file or file.startswith("/") or ".." in parts:
        raise DotfilesManifestError(
            f"Invalid file path {file!r} in section [{tool}]: "
            "paths must be relative and stay inside the tool directory"
        )


def parse_manifest(content: str) -> Manifest:
    """Parse manifest TOML text.

    Args:
        content: TOML document

    Returns:
        Parsed Manifest

    Raises:
        DotfilesManifestError: If the document is not valid TOML or a tool
            section does not have a ``files`` array of strings
    """
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise DotfilesManifestError(f"Failed to parse distribution file: {e}") from e

    manifest = Manifest()
    for section, value in data.items():
        if section.startswith("_"):
            manifest.metadata[section] = value
            continue

        if not isinstance(value, dict):
            raise DotfilesManifestError(f"Section [{section}] must be a table")
        files = value.get("files")
        if not isinstance(files, list):
            raise DotfilesManifestError(f"Section [{section}] has no 'files' array")

        seen: list[str] = []
        for file in files:
            if not isinstance(file, str):
                raise DotfilesManifestError(
                    f"Section [{section}] contains a non-string file entry: {file!r}"
                )
            _validate_relative_path(section, file)
            if file in seen:
                logger.debug("Ignoring duplicate entry %s/%s", section, file)
                continue
            seen.append(file)
        manifest.tools[section] = seen

    return manifest


def read_manifest_text(path: Path) -> str:
    """Read a manifest file as UTF-8 text.

    Raises:
        DotfilesManifestError: If the file cannot be read or is not UTF-8
    """
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise DotfilesManifestError(f"Failed to read distribution file: {e}") from e
    except UnicodeDecodeError as e:
        raise DotfilesManifestError(
            f"Distribution file is not valid UTF-8: {e}"
        ) from e


def load_manifest(path: Path) -> Manifest:
    """Read and parse a manifest file.

    Raises:
        DotfilesManifestError: If the file cannot be read or parsed
    """
    return parse_manifest(read_manifest_text(path))


def dump_manifest(manifest: Manifest) -> str:
    """Serialize a manifest to TOML text."""
    return tomli_w.dumps(manifest.to_dict())


def save_manifest(manifest: Manifest, path: Path) -> None:
    """Write a manifest back to disk.

    Raises:
        DotfilesManifestError: If the file cannot be written
    """
    try:
        path.write_text(dump_manifest(manifest), encoding="utf-8")
    except OSError as e:
        raise DotfilesManifestError(f"Failed to write distribution file: {e}") from e


@dataclass
class PrecheckResult:
    """Summary of a successful manifest precheck."""

    line_count: int
    tool_count: int
    entry_count: int
    manifest: Optional[Manifest] = None


def precheck_manifest(content: str) -> PrecheckResult:
    """Validate manifest syntax and shape without touching tracked files.

    Raises:
        DotfilesManifestError: If validation fails
    """
    manifest = parse_manifest(content)
    return PrecheckResult(
        line_count=len(content.splitlines()),
        tool_count=len(manifest.tools),
        entry_count=len(manifest),
        manifest=manifest,
    )
