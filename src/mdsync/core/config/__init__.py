"""
Configuration models and loading.

Pydantic models for mdsync configuration with multi-layer merging:
defaults < user < project < env vars.
"""

from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import (
    MdsyncConfig,
    RenderConfig,
    SerializerConfig,
    StoreConfig,
    SyncConfig,
)

__all__ = [
    # Models
    "MdsyncConfig",
    "RenderConfig",
    "SerializerConfig",
    "StoreConfig",
    "SyncConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
]
