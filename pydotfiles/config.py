"""Path configuration for pydotfiles."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .exceptions import DotfilesRepoNotFoundError

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "distribution.toml"
IGNORE_FILE_NAME = ".dotignore"
REPO_CONFIG_DIR_NAME = "config"

# Environment variables consulted when no explicit path is given
ENV_REPO = "DOTFILES_REPO"
ENV_CONFIG_DIR = "DOTFILES_CONFIG_DIR"
ENV_ARCHIVE = "PYDOTFILES_ARCHIVE"


def _as_path(value: Union[str, Path, None]) -> Optional[Path]:
    if value is None or value == "":
        return None
    return Path(value).expanduser()


@dataclass
class FilePaths:
    """Locations of the repository, the home config tree and derived files."""

    repo_dir: Path
    """Root of the dotfiles repository (e.g. ~/repos/dotfiles)"""

    config_dir: Path
    """Home configuration tree (e.g. ~/.config)"""

    archive_file: Path
    """Location of the embedded archive built by ``pydotfiles bundle``"""

    @classmethod
    def from_environment(
        cls,
        repo_dir: Union[str, Path, None] = None,
        config_dir: Union[str, Path, None] = None,
        archive_file: Union[str, Path, None] = None,
    ) -> "FilePaths":
        """Resolve paths from explicit values, the environment, then defaults.

        Args:
            repo_dir: Repository directory override
            config_dir: Home config directory override
            archive_file: Archive file override

        Returns:
            FilePaths instance
        """
        home = Path.home()

        repo = _as_path(repo_dir) or _as_path(os.environ.get(ENV_REPO))
        config = _as_path(config_dir) or _as_path(os.environ.get(ENV_CONFIG_DIR))
        archive = _as_path(archive_file) or _as_path(os.environ.get(ENV_ARCHIVE))

        return cls(
            repo_dir=repo or home / "repos" / "dotfiles",
            config_dir=config or home / ".config",
            archive_file=archive
            or home / ".local" / "share" / "pydotfiles" / "embedded.zip",
        )

    @property
    def manifest_file(self) -> Path:
        """Path to distribution.toml inside the repository."""
        return self.repo_dir / MANIFEST_FILE_NAME

    @property
    def ignore_file(self) -> Path:
        """Path to .dotignore inside the repository."""
        return self.repo_dir / IGNORE_FILE_NAME

    @property
    def repo_config_root(self) -> Path:
        """Directory holding one subdirectory per tool inside the repository."""
        return self.repo_dir / REPO_CONFIG_DIR_NAME

    def repo_file_path(self, tool: str, file: str) -> Path:
        return self.repo_config_root / tool / file

    def config_file_path(self, tool: str, file: str) -> Path:
        return self.config_dir / tool / file

    def check_paths(self, create_config_dir: bool = True) -> bool:
        """Validate that the repository and its manifest exist.

        Args:
            create_config_dir: Create the home config directory if missing

        Returns:
            True if the config directory had to be created

        Raises:
            DotfilesRepoNotFoundError: If the repository or manifest is missing
        """
        if not self.repo_dir.is_dir():
            raise DotfilesRepoNotFoundError(
                f"Repository not found: {self.repo_dir}", path=str(self.repo_dir)
            )
        if not self.manifest_file.is_file():
            raise DotfilesRepoNotFoundError(
                f"Distribution file not found: {self.manifest_file}",
                path=str(self.manifest_file),
            )

        if create_config_dir and not self.config_dir.exists():
            logger.debug("Creating config directory %s", self.config_dir)
            self.config_dir.mkdir(parents=True, exist_ok=True)
            return True
        return False
