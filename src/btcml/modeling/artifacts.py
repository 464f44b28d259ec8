"""
Model artifacts on disk.

Layout under the models directory (``BTCML_MODELS_DIR`` or ``<root>/models``)::

    <model_key>/
        model_20240101T000000Z.joblib   # the fitted BaseModel
        model_20240101T000000Z.json     # what it was trained on and how it scored
        latest.txt                      # file name of the newest artifact
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import joblib

from btcml.paths import PROJECT_ROOT
from btcml.utils import get_logger

logger = get_logger("modeling.artifacts")

SLUG_FORMAT = "%Y%m%dT%H%M%SZ"
LATEST_MARKER = "latest.txt"


@dataclass(frozen=True)
class Artifact:
    """One persisted model and its optional metadata file."""

    model_key: str
    run_date: datetime
    path: Path

    @property
    def metadata_path(self) -> Path:
        return self.path.with_suffix(".json")

    def load(self) -> Any:
        return joblib.load(self.path)

    def metadata(self) -> Dict[str, Any]:
        if not self.metadata_path.exists():
            return {}
        return json.loads(self.metadata_path.read_text())


def models_root() -> Path:
    env_root = os.getenv("BTCML_MODELS_DIR")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return PROJECT_ROOT / "models"


def _key_dir(model_key: str) -> Path:
    key = (model_key or "").strip().replace("/", "_").replace("\\", "_")
    if not key:
        raise ValueError("model_key must be non-empty.")
    return models_root() / key


def _slug(run_date: datetime | None) -> str:
    if run_date is None:
        run_date = datetime.now(UTC)
    elif run_date.tzinfo is None:
        run_date = run_date.replace(tzinfo=UTC)
    return run_date.astimezone(UTC).strftime(SLUG_FORMAT)


def _artifact(model_key: str, path: Path) -> Artifact:
    stamp = path.stem.removeprefix("model_")
    run_date = datetime.strptime(stamp, SLUG_FORMAT).replace(tzinfo=UTC)
    return Artifact(model_key=model_key, run_date=run_date, path=path)


def persist_model(
    model: Any,
    *,
    model_key: str,
    run_date: datetime | None = None,
    metadata: Dict[str, Any] | None = None,
) -> Path:
    """
    Dump a fitted model with joblib and mark it as the latest for ``model_key``.

    Args:
        model: Fitted model (any picklable object)
        model_key: Folder name, e.g. "bitcoin_price"
        run_date: Timestamp used in the file name (default: now, UTC)
        metadata: JSON-serialisable facts stored next to the artifact

    Returns:
        Path of the written .joblib file
    """
    key_dir = _key_dir(model_key)
    key_dir.mkdir(parents=True, exist_ok=True)
    path = key_dir / f"model_{_slug(run_date)}.joblib"

    joblib.dump(model, path)
    if metadata is not None:
        path.with_suffix(".json").write_text(json.dumps(metadata, indent=2, default=str))
    (key_dir / LATEST_MARKER).write_text(path.name)
    logger.debug(f"Persisted {model_key} artifact to {path}")
    return path


def list_artifacts(model_key: str) -> List[Artifact]:
    """All artifacts of ``model_key``, oldest first."""
    key_dir = _key_dir(model_key)
    return [_artifact(model_key, path) for path in sorted(key_dir.glob("model_*.joblib"))]


def find_artifact(model_key: str, *, run_date: datetime | None = None) -> Artifact:
    """
    Locate one artifact: the given run, else the one named in latest.txt,
    else the newest on disk.

    Raises:
        FileNotFoundError: If no matching artifact exists
    """
    key_dir = _key_dir(model_key)
    if run_date is not None:
        path = key_dir / f"model_{_slug(run_date)}.joblib"
        if not path.exists():
            raise FileNotFoundError(f"No artifact for model_key={model_key} at {path.stem}.")
        return _artifact(model_key, path)

    marker = key_dir / LATEST_MARKER
    if marker.exists():
        path = key_dir / marker.read_text().strip()
        if path.exists():
            return _artifact(model_key, path)

    artifacts = list_artifacts(model_key)
    if not artifacts:
        raise FileNotFoundError(f"No artifacts found for model_key={model_key}.")
    return artifacts[-1]


def load_model(model_key: str, *, run_date: datetime | None = None) -> Any:
    """Load a persisted model by key (and optional run date)."""
    return find_artifact(model_key, run_date=run_date).load()


def load_metadata(model_key: str, *, run_date: Optional[datetime] = None) -> Dict[str, Any]:
    """Metadata stored with the artifact, or {} if none was written."""
    return find_artifact(model_key, run_date=run_date).metadata()


__all__ = [
    "Artifact",
    "find_artifact",
    "list_artifacts",
    "load_metadata",
    "load_model",
    "models_root",
    "persist_model",
]
