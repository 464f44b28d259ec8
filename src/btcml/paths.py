from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ROOT_MARKERS = (".git", "pyproject.toml", "uv.lock")


def _detect_project_root(start: Optional[Path] = None) -> Path:
    """Walk upward from start until a repo marker is found."""
    base = (start or Path.cwd()).resolve()
    for candidate in (base, *base.parents):
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    return base


def get_project_root(start: Optional[Path] = None) -> Path:
    """Return the repository root, honoring PROJECT_ROOT env override."""
    env_root = os.getenv("PROJECT_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return _detect_project_root(start)


def get_data_dir(override: str | Path | None = None) -> Path:
    """
    Resolve the directory holding the raw CSV and spreadsheet inputs.

    The order of precedence is:
    1. Explicit override supplied via argument.
    2. Environment variable `BTCML_DATA_DIR` (dotenv supported).
    3. `<project root>/data`.
    """
    if override is not None and str(override).strip():
        return Path(override).expanduser().resolve()

    load_dotenv()
    env_dir = os.getenv("BTCML_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return PROJECT_ROOT / "data"


PROJECT_ROOT = get_project_root()


__all__ = ["get_data_dir", "get_project_root", "PROJECT_ROOT"]
