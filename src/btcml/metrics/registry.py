from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error

from btcml.errors import DefinitionError
from btcml.utils import get_logger

logger = get_logger("metrics")

MetricFn = Callable[[object, object], float]

_REGISTRY: Dict[str, MetricFn] = {}


def _as_pair(y_true: object, y_pred: object) -> tuple[np.ndarray, np.ndarray]:
    """Flatten both inputs to float arrays of the same non-zero length."""
    true_arr = np.asarray(y_true, dtype=float).ravel()
    pred_arr = np.asarray(y_pred, dtype=float).ravel()
    if true_arr.size == 0:
        raise ValueError("Metrics need at least one observation.")
    if true_arr.shape != pred_arr.shape:
        raise ValueError(
            f"Predictions and observations differ in length: {pred_arr.size} != {true_arr.size}"
        )
    return true_arr, pred_arr


def rmse(y_true: object, y_pred: object) -> float:
    """Root mean squared error."""
    true_arr, pred_arr = _as_pair(y_true, y_pred)
    return float(np.sqrt(mean_squared_error(true_arr, pred_arr)))


def mae(y_true: object, y_pred: object) -> float:
    """Mean absolute error."""
    true_arr, pred_arr = _as_pair(y_true, y_pred)
    return float(mean_absolute_error(true_arr, pred_arr))


def r2(y_true: object, y_pred: object) -> float:
    """
    Coefficient of determination, 1 - SS_res / SS_tot.

    Raises:
        DefinitionError: If the observed series is constant (SS_tot == 0)
    """
    true_arr, pred_arr = _as_pair(y_true, y_pred)
    ss_tot = float(np.sum((true_arr - true_arr.mean()) ** 2))
    if ss_tot == 0.0:
        raise DefinitionError("R² is undefined for a constant observed series.")
    ss_res = float(np.sum((true_arr - pred_arr) ** 2))
    return 1.0 - ss_res / ss_tot


def register_metric(name: str, fn: MetricFn) -> None:
    """Register or override a metric by name (case-insensitive)."""
    key = name.strip().lower()
    if not key:
        raise ValueError("Metric name must be non-empty.")
    _REGISTRY[key] = fn


def get_metric(name: str) -> MetricFn:
    """Return a registered metric callable."""
    key = name.strip().lower()
    if key not in _REGISTRY:
        raise KeyError(f"Metric '{name}' is not registered.")
    return _REGISTRY[key]


def list_metrics() -> List[str]:
    """List available metric names."""
    return sorted(_REGISTRY.keys())


def compute_metrics(
    names: Iterable[str],
    y_true: object,
    y_pred: object,
    strict: bool = True,
) -> Dict[str, Optional[float]]:
    """
    Evaluate several metrics on the same predictions.

    With ``strict=False`` a metric that raises DefinitionError is reported
    as None and the remaining metrics are still computed.
    """
    results: Dict[str, Optional[float]] = {}
    for name in names:
        try:
            results[name] = get_metric(name)(y_true, y_pred)
        except DefinitionError as exc:
            if strict:
                raise
            logger.warning(f"Metric '{name}' skipped: {exc}")
            results[name] = None
    return results


# Default metrics
register_metric("rmse", rmse)
register_metric("mae", mae)
register_metric("r2", r2)

__all__ = [
    "MetricFn",
    "compute_metrics",
    "get_metric",
    "list_metrics",
    "mae",
    "r2",
    "register_metric",
    "rmse",
]
