"""Environment loading helpers.

mdsync reads a few settings (store path, timezone, creation policy) from
``MDSYNC_*`` variables. Those may come from the shell or from layered
``.env`` files:

  os.environ (pre-existing) > project .env.local > project .env > user .env

A ``.env`` file never overrides a variable already exported in the shell.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values


def _read_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values = dotenv_values(path)
    return {str(k): str(v) for k, v in values.items() if k is not None and v is not None}


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> None:
    """Load environment variables from user + project .env files.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths
    """
    if project_dir is None:
        project_dir = Path.cwd()

    if user_env_paths is None:
        xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
        user_env_paths = [xdg_home / "mdsync" / ".env"]

    if project_env_paths is None:
        project_env_paths = [project_dir / ".env", project_dir / ".env.local"]

    # Keys set from files may be overridden by later files, never OS env
    file_keys: set[str] = set()
    for p in [*user_env_paths, *project_env_paths]:
        for k, v in _read_env(Path(p)).items():
            if k not in os.environ or k in file_keys:
                os.environ[k] = v
                file_keys.add(k)
