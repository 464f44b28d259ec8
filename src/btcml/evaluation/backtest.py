"""Rolling-origin backtesting with guaranteed data leakage prevention.

This module evaluates a model configuration over a sequence of
rolling-origin folds and ensures:
1. No data leakage - every fold fits a fresh model on its training window only
2. Validation rows are always later in time than the rows the model saw
3. Consistent evaluation across feature-based and univariate models
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type

import numpy as np
import pandas as pd

from btcml.metrics.registry import compute_metrics
from btcml.modeling.base import BaseModel

from .rolling_origin import Fold

logger = logging.getLogger(__name__)


@dataclass
class FoldResult:
    """Metrics for one fold."""

    fold: Fold
    metrics: Dict[str, Optional[float]]


@dataclass
class BacktestResult:
    """Results from rolling-origin backtesting.

    Attributes:
        model_name: Name of the model used
        params: Parameters used to create the model
        fold_results: Per-fold metrics, in fold order
        metric_names: Metrics computed on every fold
    """
    model_name: str
    params: Dict[str, Any]
    fold_results: List[FoldResult] = field(default_factory=list)
    metric_names: List[str] = field(default_factory=list)

    @property
    def n_folds(self) -> int:
        return len(self.fold_results)

    @property
    def fold_metrics(self) -> pd.DataFrame:
        """One row per fold, one column per metric."""
        rows = [{"fold": r.fold.index, **r.metrics} for r in self.fold_results]
        return pd.DataFrame(rows, columns=["fold", *self.metric_names]).set_index("fold")

    @property
    def mean_metrics(self) -> Dict[str, Optional[float]]:
        """Mean of each metric over the folds where it was defined."""
        means: Dict[str, Optional[float]] = {}
        for name in self.metric_names:
            values = [r.metrics.get(name) for r in self.fold_results]
            defined = [v for v in values if v is not None]
            means[name] = float(np.mean(defined)) if defined else None
        return means


def _predict_window(model: BaseModel, features: pd.DataFrame, fold: Fold) -> np.ndarray:
    if model.uses_features:
        return model.predict(features)
    # Univariate forecasts start right after the training window
    return model.predict(features, offset=fold.validation.start - fold.train.stop)


def rolling_origin_backtest(
    model_class: Type[BaseModel],
    model_params: Dict[str, Any],
    features: pd.DataFrame,
    target: pd.Series,
    folds: Iterable[Fold],
    metric_names: Sequence[str] = ("rmse", "r2", "mae"),
    verbose: bool = False,
) -> BacktestResult:
    """
    Evaluate one model configuration fold by fold.

    A FRESH model instance is created for every fold, fitted on the fold's
    training rows only, and scored on its validation rows.

    Args:
        model_class: The model class to test (e.g., GradientBoostingModel)
        model_params: Parameters to pass to the model constructor
        features: Feature rows of the date-sorted table
        target: Target values aligned with ``features``
        folds: Rolling-origin folds over ``features``
        metric_names: Registered metric names to compute
        verbose: Log each fold at INFO level (default: DEBUG)

    Returns:
        BacktestResult with per-fold metrics

    Notes:
        - A metric that is undefined on a fold (R² on a constant validation
          window) is recorded as None and left out of the mean.
    """
    if len(features) != len(target):
        raise ValueError(f"features ({len(features)}) and target ({len(target)}) differ in length")

    log = logger.info if verbose else logger.debug
    metric_names = list(metric_names)
    result: BacktestResult | None = None

    for fold in folds:
        train_X, val_X = fold.slice(features)
        train_y = target.iloc[fold.train.as_slice()]
        val_y = target.iloc[fold.validation.as_slice()]

        # CRITICAL: a fresh instance per fold so no fitted state crosses folds
        model = model_class(**model_params)
        if result is None:
            result = BacktestResult(model_name=model.name, params=dict(model_params), metric_names=metric_names)

        model.fit(train_X, train_y)
        predictions = _predict_window(model, val_X, fold)
        metrics = compute_metrics(metric_names, val_y.to_numpy(), predictions, strict=False)
        result.fold_results.append(FoldResult(fold=fold, metrics=metrics))
        log(
            f"{model.name} fold {fold.index}: train [{fold.train.start}, {fold.train.stop}) "
            f"val [{fold.validation.start}, {fold.validation.stop}) -> {metrics}"
        )

    if result is None:
        # No folds: still report which model was asked for
        result = BacktestResult(
            model_name=model_class(**model_params).name,
            params=dict(model_params),
            metric_names=metric_names,
        )
    return result


def backtest_multiple_models(
    model_specs: List[Dict[str, Any]],
    features: pd.DataFrame,
    target: pd.Series,
    folds: Sequence[Fold],
    metric_names: Sequence[str] = ("rmse", "r2", "mae"),
    verbose: bool = False,
) -> List[BacktestResult]:
    """
    Backtest multiple models on the same folds.

    Args:
        model_specs: List of dicts with "class" and "params" keys

    Example:
        >>> results = backtest_multiple_models(
        ...     model_specs=[
        ...         {"class": GradientBoostingModel, "params": {"max_depth": 3}},
        ...         {"class": ARIMAModel, "params": {"max_p": 3}},
        ...     ],
        ...     features=X, target=y, folds=rolling_origin_folds(len(X)),
        ... )
    """
    results = []
    for spec in model_specs:
        results.append(
            rolling_origin_backtest(
                model_class=spec["class"],
                model_params=spec.get("params", {}),
                features=features,
                target=target,
                folds=folds,
                metric_names=metric_names,
                verbose=verbose,
            )
        )
    return results


__all__ = ["BacktestResult", "FoldResult", "backtest_multiple_models", "rolling_origin_backtest"]
