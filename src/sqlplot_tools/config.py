"""
Configuration Loader

Loads sqlplot-tools settings from sqlplot_tools.json in the project root.
Environment variables always take precedence over config file values, and
command-line options take precedence over both.

Config file location (in order of precedence):
1. SQLPLOT_PROJECT_ROOT/sqlplot_tools.json (if SQLPLOT_PROJECT_ROOT is set)
2. CWD/sqlplot_tools.json

Supported settings in sqlplot_tools.json:
{
    "database": "sqlite:results.db",   // -> SQLPLOT_DATABASE
    "filetype": "latex",               // -> SQLPLOT_FILETYPE
    "ranges": ["fig1", "tab2"],        // -> SQLPLOT_RANGES (comma separated)
    "verbose": 1,                      // -> SQLPLOT_VERBOSE
    "log_file": "sqlplot.log"          // -> SQLPLOT_LOG_FILE
}
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "sqlplot_tools.json"


@dataclass
class Settings:
    """Resolved settings of one run."""
    database: str = ""
    filetype: Optional[str] = None
    ranges: List[str] = field(default_factory=list)
    verbose: int = 0
    log_file: Optional[str] = None


class ConfigLoader:
    """
    Loads configuration from sqlplot_tools.json file.

    ::: This is-in-layer Service-Layer.
    ::: This is a loader.
    ::: This is-in-process Main-Process.
    ::: This is stateless.

    Priority: Environment variables > sqlplot_tools.json > defaults
    """

    # Mapping from sqlplot_tools.json keys to environment variable names
    CONFIG_KEY_TO_ENV = {
        "database": "SQLPLOT_DATABASE",
        "filetype": "SQLPLOT_FILETYPE",
        "ranges": "SQLPLOT_RANGES",
        "verbose": "SQLPLOT_VERBOSE",
        "log_file": "SQLPLOT_LOG_FILE",
    }

    DEFAULTS: Dict[str, Any] = {
        "database": "",
        "filetype": None,
        "ranges": [],
        "verbose": 0,
        "log_file": None,
    }

    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._config_path: Optional[Path] = None
        self._loaded = False

    def load(self, project_root: Optional[Path] = None) -> bool:
        """
        Load configuration from sqlplot_tools.json.

        Args:
            project_root: Directory holding the config file. If None, uses
                SQLPLOT_PROJECT_ROOT or CWD.

        Returns:
            True if config file was found and loaded, False otherwise.
        """
        if self._loaded:
            return self._config_path is not None

        if project_root is None:
            env_root = os.getenv("SQLPLOT_PROJECT_ROOT")
            project_root = Path(env_root) if env_root else Path.cwd()

        config_path = Path(project_root) / CONFIG_FILENAME
        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    self._config = json.load(f)
                self._config_path = config_path
                logger.debug("Loaded config from: %s", config_path)
            except json.JSONDecodeError as e:
                logger.warning("Invalid JSON in %s: %s", config_path, e)
            except OSError as e:
                logger.warning("Error loading %s: %s", config_path, e)

        self._loaded = True
        return self._config_path is not None

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw config file value."""
        return self._config.get(key, default)

    def _resolve(self, key: str) -> Any:
        default_value = self.DEFAULTS[key]

        # Check environment variable first
        env_value = os.getenv(self.CONFIG_KEY_TO_ENV[key])
        if env_value is not None:
            if key == "ranges":
                return [r.strip() for r in env_value.split(",") if r.strip()]
            if key == "verbose":
                try:
                    return int(env_value)
                except ValueError:
                    logger.warning("Ignoring invalid %s=%s", self.CONFIG_KEY_TO_ENV[key], env_value)
                    return default_value
            return env_value

        # Check config file
        if key in self._config:
            value = self._config[key]
            if key == "ranges" and isinstance(value, str):
                return [r.strip() for r in value.split(",") if r.strip()]
            return value

        return default_value

    def settings(self) -> Settings:
        """Settings with environment, config file and defaults applied."""
        return Settings(
            database=self._resolve("database") or "",
            filetype=self._resolve("filetype") or None,
            ranges=list(self._resolve("ranges")),
            verbose=int(self._resolve("verbose") or 0),
            log_file=self._resolve("log_file") or None,
        )

    @property
    def config_path(self) -> Optional[Path]:
        """Path to the loaded config file, or None if not loaded."""
        return self._config_path

    @property
    def config(self) -> Dict[str, Any]:
        """The loaded configuration dictionary."""
        return self._config.copy()


def load_settings(project_root: Optional[Path] = None) -> Settings:
    """Load sqlplot_tools.json (if any) and resolve the settings."""
    loader = ConfigLoader()
    loader.load(project_root)
    return loader.settings()
