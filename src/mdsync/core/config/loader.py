"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from mdsync.utils.merge import deep_merge

from .models import MdsyncConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: MdsyncConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/mdsync/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "mdsync" / "config.json"


def get_project_config_path(project_dir: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        project_dir: Project root (defaults to current directory)

    Returns:
        Path to .mdsync.json in the project root
    """
    if project_dir is None:
        project_dir = Path.cwd()
    return project_dir / ".mdsync.json"


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning(f"Ignoring config at {path}: top level is not an object")
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None


def _truthy(value: str) -> bool:
    return value.strip().lower() not in ("false", "0", "no", "off", "")


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        MDSYNC_STORE - overrides store.path
        MDSYNC_TIMEZONE - overrides timezone
        MDSYNC_SKIP_CREATE - truthy value sets sync.allow_create to False
        MDSYNC_EXCLUDED_TYPES - comma-separated list, overrides sync.excluded_types

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if store_path := os.environ.get("MDSYNC_STORE"):
        result["store"] = {**result.get("store", {}), "path": store_path}

    if tz_name := os.environ.get("MDSYNC_TIMEZONE"):
        result["timezone"] = tz_name

    if skip_create := os.environ.get("MDSYNC_SKIP_CREATE"):
        result["sync"] = {**result.get("sync", {}), "allow_create": not _truthy(skip_create)}

    if (excluded := os.environ.get("MDSYNC_EXCLUDED_TYPES")) is not None:
        types = [t.strip() for t in excluded.split(",") if t.strip()]
        result["sync"] = {**result.get("sync", {}), "excluded_types": types}

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "sync": {"allow_create": True, "default_kind": "post"},
        "serializer": {"width": 120, "indent": 2},
        "store": {"path": ".mdsync/store.db"},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> MdsyncConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (MDSYNC_*)
        2. Project config (.mdsync.json)
        3. User config (~/.config/mdsync/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project root to load .mdsync.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated MdsyncConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation

    Example:
        >>> config = load_config()
        >>> config.sync.default_kind
        'post'
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = MdsyncConfig(**merged)
    _config_cache = config
    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
