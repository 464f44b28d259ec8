from __future__ import annotations

from typing import Any, Dict, List, Type

from .arima import ARIMAModel
from .base import BaseModel
from .gradient_boosting import GradientBoostingModel
from .quantile_forest import QuantileForestModel

_REGISTRY: Dict[str, Dict[str, Any]] = {}


def register_model(name: str, cls: Type[BaseModel], default_grid: Dict[str, Any] | None = None) -> None:
    """Register or override a model by name."""
    key = name.strip()
    if not key:
        raise ValueError("Model name must be non-empty.")
    if not issubclass(cls, BaseModel):
        raise TypeError("Model class must inherit from BaseModel.")
    _REGISTRY[key] = {"cls": cls, "default_grid": default_grid or {}}


def get_model(name: str) -> Type[BaseModel]:
    """Return a registered model class."""
    key = name.strip()
    if key not in _REGISTRY:
        raise KeyError(f"Model '{name}' is not registered.")
    return _REGISTRY[key]["cls"]


def get_default_grid(name: str) -> Dict[str, Any]:
    """Return the default parameter grid for a registered model."""
    key = name.strip()
    if key not in _REGISTRY:
        raise KeyError(f"Model '{name}' is not registered.")
    return dict(_REGISTRY[key]["default_grid"])


def list_models() -> List[str]:
    """List available model names."""
    return sorted(_REGISTRY.keys())


register_model(
    "GradientBoosting",
    GradientBoostingModel,
    {"n_estimators": [200, 500], "max_depth": [3, 5], "learning_rate": 0.05},
)
register_model(
    "QuantileForest",
    QuantileForestModel,
    {"n_estimators": 500, "min_samples_leaf": [1, 5], "max_features": [1.0, 0.5]},
)
register_model("ARIMA", ARIMAModel, {"d": 1, "max_p": 5, "max_q": 5})

__all__ = ["register_model", "get_model", "get_default_grid", "list_models"]
