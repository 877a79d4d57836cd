"""Sync directions."""

from enum import Enum


class SyncDirection(str, Enum):
    """Which tree plays the source and which the destination."""

    SYNC = "sync"
    """Home config tree -> repository"""

    INSTALL = "install"
    """Repository -> home config tree"""

    STATUS = "status"
    """Read-only comparison, oriented like INSTALL"""

    @property
    def source_is_home(self) -> bool:
        return self == SyncDirection.SYNC

    @property
    def writes(self) -> bool:
        """Whether this direction copies files."""
        return self != SyncDirection.STATUS

    @property
    def verb(self) -> str:
        return {
            SyncDirection.SYNC: "Synced to repo",
            SyncDirection.INSTALL: "Installed to local",
            SyncDirection.STATUS: "Checked",
        }[self]

    @property
    def heading(self) -> str:
        return {
            SyncDirection.SYNC: "Syncing dotfiles...",
            SyncDirection.INSTALL: "Installing dotfiles...",
            SyncDirection.STATUS: "Checking dotfiles status...",
        }[self]
