"""Configuration for react-lens.

Loads config.yaml with browser, inspection and logging settings.

Example .react-lens/config.yaml:

    headless: false
    connect_existing: true
    cdp_port: 9222
    target_url: http://localhost:5173
    max_props: 3
    log_level: DEBUG
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

# Directory names
GLOBAL_DIR_NAME = ".react-lens"
PROJECT_DIR_NAME = ".react-lens"
CONFIG_FILE_NAME = "config.yaml"


def get_effective_cwd() -> Path:
    """Get the effective working directory.

    Returns REACT_LENS_CWD if set, else Path.cwd().
    """
    env_cwd = os.getenv("REACT_LENS_CWD")
    if env_cwd:
        return Path(env_cwd).resolve()
    return Path.cwd()


def get_global_dir() -> Path:
    """Get the global directory path (~/.react-lens/, not necessarily existing)."""
    return Path.home() / GLOBAL_DIR_NAME


class LensConfig(BaseModel):
    """Configuration for the react-lens server."""

    # Browser settings
    headless: bool = Field(default=True, description="Run browser in headless mode")
    connect_existing: bool = Field(
        default=False,
        description="Attach to a running Chrome over CDP instead of launching one",
    )
    cdp_port: int = Field(
        default=9222,
        ge=1,
        le=65535,
        description="CDP port for connecting to existing browser",
    )
    no_viewport: bool = Field(
        default=True,
        description="Allow browser window to resize (True) or use fixed viewport (False)",
    )
    browser_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"],
        description="Additional browser launch arguments",
    )
    target_url: str | None = Field(
        default=None,
        description="URL opened on startup, after the hook is installed",
    )
    navigation_timeout_ms: int = Field(
        default=30000, ge=0, description="Timeout for navigation and reload"
    )

    # Inspection limits
    max_props: int = Field(
        default=3, ge=0, description="Props shown per component line"
    )
    max_state_chars: int = Field(
        default=80, ge=10, description="Max characters of a state summary"
    )
    max_string_length: int = Field(
        default=40, ge=4, description="Max characters of a string prop value"
    )
    max_fiber_nodes: int = Field(
        default=20000, ge=1, description="Hard ceiling on fiber nodes extracted per call"
    )
    max_walk_steps: int = Field(
        default=50000, ge=1, description="Hard ceiling on walker steps per call"
    )
    max_owner_steps: int = Field(
        default=20,
        ge=1,
        description="Steps allowed when walking up from a host element to its component",
    )
    max_owners: int = Field(
        default=10, ge=0, description="Owner components collected per lookup"
    )
    max_root_nodes: int = Field(
        default=2000, ge=1, description="Node count cap when listing roots"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_dir: str = Field(
        default="~/.react-lens/logs", description="Directory for log files"
    )

    def get_log_dir_path(self) -> Path:
        """Get resolved path for the log directory."""
        return Path(self.log_dir).expanduser().resolve()


def load_config(config_path: Path | str | None = None) -> LensConfig:
    """Load react-lens configuration from a YAML file.

    Resolution order (when config_path is None):
    1. REACT_LENS_CONFIG env var
    2. cwd/.react-lens/config.yaml
    3. ~/.react-lens/config.yaml
    4. Built-in defaults

    Args:
        config_path: Path to config file (overrides resolution)

    Returns:
        Validated LensConfig

    Raises:
        ValueError: If the file is not valid YAML or fails validation
    """
    if config_path is None:
        env_config = os.getenv("REACT_LENS_CONFIG")
        if env_config:
            config_path = Path(env_config)
        else:
            candidates = [
                get_effective_cwd() / PROJECT_DIR_NAME / CONFIG_FILE_NAME,
                get_global_dir() / CONFIG_FILE_NAME,
            ]
            config_path = next((c for c in candidates if c.exists()), None)
            if config_path is None:
                return LensConfig()
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        return LensConfig()

    try:
        with config_path.open() as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Error reading {config_path}: {e}") from e

    if raw_data is None:
        raw_data = {}

    try:
        config = LensConfig.model_validate(raw_data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    return config


# Global config instance
_config: LensConfig | None = None


def get_config(
    config_path: Path | str | None = None, reload: bool = False
) -> LensConfig:
    """Get or load the global configuration.

    Args:
        config_path: Path to config file (only used on first load)
        reload: Force reload configuration

    Returns:
        LensConfig instance
    """
    global _config

    if _config is None or reload:
        _config = load_config(config_path)

    return _config


def set_config(config: LensConfig) -> None:
    """Replace the global configuration (CLI overrides, tests)."""
    global _config
    _config = config
