"""
navistore User Configuration

Layered JSON config read once per UserConfig:
- Global: ~/.navistore/config.json
- Local: .navistore/config.json, overriding global per key

Keys consumed by NaviStore:
{
  "storage": {
    "db_name": "navi.sqlite",   // Database file name inside a data directory
    "timeout": 30.0,            // SQLite busy timeout in seconds
    "wal_mode": true            // Use write-ahead logging
  },
  "partition": {
    "max_rows": 10000           // Row ceiling per navi_data_<id> partition
  }
}
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from navistore.exceptions import ConfigError
from navistore.logging_config import logger
from navistore.paths import NaviStorePaths


DEFAULT_CONFIG = {
    "storage": {
        "db_name": NaviStorePaths.DATABASE_NAME,
        "timeout": 30.0,
        "wal_mode": True,
    },
    "partition": {
        "max_rows": 10000,
    },
}


def _merge(base: Dict, override: Dict) -> Dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class UserConfig:
    """
    Store settings: defaults, then the global file, then the local file.

    Args:
        project_root: Directory whose .navistore/config.json is the local layer (defaults to CWD)
        global_dir: Directory holding the global config.json (defaults to ~/.navistore)
    """

    def __init__(self, project_root: Optional[Path] = None, global_dir: Optional[Path] = None):
        self.global_config_path = (global_dir or NaviStorePaths.GLOBAL_DIR) / NaviStorePaths.CONFIG_NAME
        self.local_config_path = NaviStorePaths(project_root).local_config
        self._config = self._load()

    def _load(self) -> Dict[str, Any]:
        config = copy.deepcopy(DEFAULT_CONFIG)
        for label, path in (("global", self.global_config_path), ("local", self.local_config_path)):
            if not path.exists():
                continue
            try:
                config = _merge(config, json.loads(path.read_text()))
                logger.debug(f"Loaded {label} config from {path}")
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable {label} config {path}: {e}")
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dot-separated key such as "partition.max_rows".

        Returns `default` when any segment is missing.
        """
        value = self._config
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def get_int(self, key: str, default: int) -> int:
        """Get a config value that must be a positive integer."""
        value = self.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"Config value '{key}' must be a positive integer, got {value!r}")
        return value


_config: Optional[UserConfig] = None


def get_user_config() -> UserConfig:
    """Shared UserConfig for the current working directory."""
    global _config
    if _config is None:
        _config = UserConfig()
    return _config


def reset_user_config() -> None:
    """Drop the shared instance so the next call re-reads the files."""
    global _config
    _config = None
