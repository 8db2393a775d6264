"""
navistore Path Configuration

Centralized path management for navistore data files.
All paths are relative to the project root (current working directory).

Directory Structure:
.navistore/
├── navi.sqlite          # Way topology and navigation data store
├── config.json          # Local configuration overrides
└── logs/                # Log files
"""

from pathlib import Path
from typing import Optional, Union


class NaviStorePaths:
    """
    Centralized path configuration for navistore.

    All paths are lazily resolved relative to project_root.
    Default project_root is current working directory.
    """

    # Directory name for all navistore data
    NAVISTORE_DIR = ".navistore"
    GLOBAL_DIR = Path.home() / ".navistore"

    # File names (without paths)
    DATABASE_NAME = "navi.sqlite"
    CONFIG_NAME = "config.json"

    # Subdirectory names
    LOGS_DIR = "logs"

    # Suffixes that mark a path as a database file rather than a directory
    DATABASE_SUFFIXES = (".sqlite", ".db")

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize paths configuration.

        Args:
            project_root: Root directory for the project. Defaults to CWD.
        """
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def navistore_dir(self) -> Path:
        """Get the .navistore directory path."""
        return self.project_root / self.NAVISTORE_DIR

    @property
    def local_config(self) -> Path:
        return self.navistore_dir / self.CONFIG_NAME

    @property
    def logs_dir(self) -> Path:
        """Get the logs directory path."""
        return self.navistore_dir / self.LOGS_DIR

    def ensure_dirs(self) -> None:
        """Create all necessary directories if they don't exist."""
        self.navistore_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(exist_ok=True)

    @classmethod
    def resolve_database(cls, location: Union[str, Path], db_name: str = DATABASE_NAME) -> Path:
        """
        Resolve a user-supplied location to a database file path.

        A path ending in .sqlite or .db is used as-is; anything else is
        treated as a directory that holds `db_name`.
        """
        location = Path(location)
        if location.suffix in cls.DATABASE_SUFFIXES:
            return location
        return location / db_name


# Global instance for convenience
_default_paths: Optional[NaviStorePaths] = None


def get_paths(project_root: Optional[Path] = None) -> NaviStorePaths:
    """
    Get the paths configuration.

    Args:
        project_root: Optional project root override. If None, uses CWD.

    Returns:
        NaviStorePaths instance
    """
    global _default_paths

    if project_root is not None:
        return NaviStorePaths(project_root)

    if _default_paths is None:
        _default_paths = NaviStorePaths()

    return _default_paths


def reset_paths() -> None:
    """Reset the global paths instance (useful for testing)."""
    global _default_paths
    _default_paths = None
