"""Shared fixtures for pydotfiles tests."""

import os
from pathlib import Path
from typing import Optional

import pytest

from pydotfiles.config import FilePaths


def write_file(path: Path, content: str, mtime: Optional[float] = None) -> Path:
    """Create a file (and its parents) with optional modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def paths(tmp_path):
    """Repository, home config tree and archive location under tmp_path."""
    file_paths = FilePaths(
        repo_dir=tmp_path / "repo",
        config_dir=tmp_path / "home" / ".config",
        archive_file=tmp_path / "embedded.zip",
    )
    file_paths.repo_dir.mkdir(parents=True)
    file_paths.config_dir.mkdir(parents=True)
    return file_paths
