"""
Configuration models and loading.

Multi-layer merging: defaults < user < project < env vars.
"""

from .env import load_layered_env
from .loader import (
    clear_cache,
    deep_merge,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import (
    DiscoveryConfig,
    NotifyConfig,
    OptimizerConfig,
    PricingConfig,
    RouteoptConfig,
)

__all__ = [
    # Models
    "DiscoveryConfig",
    "NotifyConfig",
    "OptimizerConfig",
    "PricingConfig",
    "RouteoptConfig",
    # Loader functions
    "clear_cache",
    "deep_merge",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
]
