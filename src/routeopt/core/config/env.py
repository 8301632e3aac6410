"""
Layered .env loading.

Secrets such as GEMINI_API_KEY and the Telegram target usually live in a
.env file rather than in config.json. Two layers are read:

    user:    $XDG_CONFIG_HOME/routeopt/.env, then ~/.openclaw/.env
    project: ./.env

Variables exported in the shell always win; project values replace user
values.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def default_user_env_paths() -> list[Path]:
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return [xdg_home / "routeopt" / ".env", Path.home() / ".openclaw" / ".env"]


def read_env_file(path: Path) -> dict[str, str]:
    """Key/value pairs of a .env file; keys without a value are dropped."""
    if not path.is_file():
        return {}
    return {key: value for key, value in dotenv_values(path).items() if key and value is not None}


def _export(paths: Iterable[Path], replaceable: set[str]) -> set[str]:
    exported: set[str] = set()
    for path in paths:
        values = read_env_file(Path(path))
        for key, value in values.items():
            if key in os.environ and key not in replaceable:
                continue
            os.environ[key] = value
            exported.add(key)
        if values:
            logger.debug(f"Loaded {len(values)} variable(s) from {path}")
    return exported


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> set[str]:
    """
    Export .env variables into os.environ.

    Args:
        project_dir: Directory holding the project .env (defaults to cwd)
        user_env_paths: Override the user layer files
        project_env_paths: Override the project layer files

    Returns:
        Names of the variables exported by this call
    """
    project_dir = project_dir or Path.cwd()
    if user_env_paths is None:
        user_env_paths = default_user_env_paths()
    if project_env_paths is None:
        project_env_paths = [project_dir / ".env"]

    from_user = _export(user_env_paths, replaceable=set())
    from_project = _export(project_env_paths, replaceable=from_user)
    return from_user | from_project
