"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .models import RouteoptConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: RouteoptConfig | None = None

TRUE_VALUES = ("1", "true", "yes", "on")


def get_xdg_config_home() -> Path:
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/routeopt/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "routeopt" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".routeopt.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`; nested
    dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10, "y": 20}}, {"b": {"y": 30}, "c": 3})
        {'a': 1, 'b': {'x': 10, 'y': 30}, 'c': 3}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


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
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None


def _as_bool(value: str) -> bool:
    return value.strip().lower() in TRUE_VALUES


# env var -> (config path, converter); None converter keeps the string
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], Callable[[str], Any] | None]] = {
    "SOUL_PATH": (("soul_path",), None),
    "ROUTEOPT_DATA_DIR": (("data_dir",), None),
    "ROUTEOPT_REPORTS_DIR": (("reports_dir",), None),
    "ROUTEOPT_QUALITY_WEIGHT": (("optimizer", "quality_weight"), float),
    "ROUTEOPT_MIN_QUALITY": (("optimizer", "min_quality"), int),
    "ROUTEOPT_PRICING_TIMEOUT": (("pricing", "timeout_seconds"), float),
    "ROUTEOPT_ALLOW_ALL_MODELS": (("optimizer", "allow_all_models"), _as_bool),
    "GEMINI_CLASSIFIER_MODEL": (("discovery", "classifier_model"), None),
}

# first one set wins
TARGET_ENV_VARS = (
    "MODEL_OPTIMIZER_TELEGRAM_TARGET",
    "OPENCLAW_TELEGRAM_TARGET",
    "TELEGRAM_TARGET",
)


def _set_path(config_dict: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    node = config_dict
    for key in path[:-1]:
        if not isinstance(node.get(key), dict):
            node[key] = {}
        node = node[key]
    node[path[-1]] = value


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.
    Values that do not convert (e.g. ROUTEOPT_MIN_QUALITY=high) are
    ignored with a warning.

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = deep_merge({}, config_dict)

    for name, (path, convert) in ENV_OVERRIDES.items():
        raw = os.environ.get(name)
        if not raw:
            continue
        try:
            value = convert(raw) if convert else raw
        except ValueError:
            logger.warning(f"Invalid {name} value '{raw}', ignoring")
            continue
        _set_path(result, path, value)

    for name in TARGET_ENV_VARS:
        if target := os.environ.get(name):
            _set_path(result, ("notify", "target"), target)
            break

    return result


def get_default_config() -> dict[str, Any]:
    """Hardcoded defaults (the model defaults fill in everything else)."""
    return {
        "soul_path": "~/.openclaw/workspace/SOUL.md",
        "data_dir": "data",
        "reports_dir": "reports",
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> RouteoptConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables
        2. Project config (.routeopt.json)
        3. User config (~/.config/routeopt/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .routeopt.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated RouteoptConfig instance

    Raises:
        pydantic.ValidationError: If the merged config fails validation

    Example:
        >>> config = load_config()
        >>> config.optimizer.min_quality
        6
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

    config = RouteoptConfig(**merged)
    _config_cache = config
    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
