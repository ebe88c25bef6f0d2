"""Configuration helpers for loading environment variables.

This module ensures that variables defined in a project-level ``.env`` file
are loaded before attempting to access them.  Consumers should rely on the
``get_env`` helper instead of using :func:`os.getenv` directly so that the
configuration is loaded in a single, well-defined place.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_MAX_JOINTS = 256
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_HTTP_RETRIES = 3

_TRUTHY = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def _load_environment() -> None:
    """Load environment variables from the project's ``.env`` file.

    The loader first attempts to read ``.env`` from the repository root.  If the
    file does not exist we still call :func:`load_dotenv` to allow the default
    discovery mechanism to run (e.g., for users who store the file elsewhere).
    Subsequent calls are cached so the file is only read once per process.
    """

    project_root = Path(__file__).resolve().parents[1]
    env_path = project_root / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(override=False)


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the value for ``key`` from the environment.

    Parameters
    ----------
    key:
        The name of the environment variable to look up.
    default:
        The value to return when ``key`` is not present.
    """

    _load_environment()
    return os.environ.get(key, default)


def get_bool(key: str, default: bool = False) -> bool:
    """Interpret ``key`` as a boolean flag."""

    value = get_env(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def get_int(key: str, default: int) -> int:
    """Interpret ``key`` as an integer, falling back to ``default`` when unset."""

    value = get_env(key)
    if value is None or not value.strip():
        return default
    return int(value)


def get_float(key: str, default: float) -> float:
    """Interpret ``key`` as a float, falling back to ``default`` when unset."""

    value = get_env(key)
    if value is None or not value.strip():
        return default
    return float(value)


@dataclass(frozen=True)
class ImportOptions:
    """Knobs controlling how forgiving an import is.

    ``strict`` turns out-of-range cross references (a primitive's material, a
    node's mesh, a scene's nodes, ...) into :class:`~gltfgraph.errors.InvalidIndexError`
    instead of skipping them with a warning. ``max_joints`` is only checked, never
    enforced: skins above the limit import fine but emit a warning event.
    """

    strict: bool = False
    max_joints: int = DEFAULT_MAX_JOINTS

    @classmethod
    def from_env(cls) -> "ImportOptions":
        return cls(
            strict=get_bool("GLTFGRAPH_STRICT"),
            max_joints=get_int("GLTFGRAPH_MAX_JOINTS", DEFAULT_MAX_JOINTS),
        )


__all__ = ["ImportOptions", "get_bool", "get_env", "get_float", "get_int"]
