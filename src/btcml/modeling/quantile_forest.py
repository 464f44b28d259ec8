"""
Quantile Random Forest for the Bitcoin market price.

A quantile regression forest keeps every training target in its leaves
instead of only the leaf mean, so any conditional quantile can be read off
the same fitted forest. The point prediction used for RMSE/R²/MAE is the
configured quantile (the median by default); ``predict_quantiles`` gives
prediction intervals for the report.

Example:
    >>> model = QuantileForestModel(n_estimators=500, min_samples_leaf=5)
    >>> model.fit(train_X, train_y)
    >>> median = model.predict(test_X)
    >>> bands = model.predict_quantiles(test_X, quantiles=[0.05, 0.95])
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd
from quantile_forest import RandomForestQuantileRegressor

from .base import BaseModel


class QuantileForestModel(BaseModel):
    """
    Quantile Random Forest regressor.

    Wraps ``quantile_forest.RandomForestQuantileRegressor``.

    Parameters:
        quantile: Quantile returned by predict() (0.5 = median)
        n_estimators: Number of trees
        max_features: Features considered per split (sklearn semantics)
        min_samples_leaf: Minimum training rows per leaf
        random_state: Seed for bootstrap sampling

    Attributes:
        name: "QuantileForest"
    """

    @property
    def name(self) -> str:
        """Model name for logging and identification."""
        return "QuantileForest"

    @property
    def default_params(self) -> Dict[str, Any]:
        """Default forest parameters."""
        return {
            "quantile": 0.5,
            "n_estimators": 500,
            "max_features": 1.0,
            "min_samples_leaf": 1,
            "random_state": 42,
        }

    def __init__(
        self,
        quantile: float = 0.5,
        n_estimators: int = 500,
        max_features: Any = 1.0,
        min_samples_leaf: int = 1,
        random_state: int = 42,
        **kwargs: Any,
    ) -> None:
        if not 0 < quantile < 1:
            raise ValueError(f"quantile must be in (0, 1), got {quantile}")
        self.params: Dict[str, Any] = {
            "quantile": quantile,
            "n_estimators": n_estimators,
            "max_features": max_features,
            "min_samples_leaf": min_samples_leaf,
            "random_state": random_state,
            **kwargs,
        }
        self._model: Optional[RandomForestQuantileRegressor] = None

    def build_model(self, **kwargs: Any) -> RandomForestQuantileRegressor:
        """Build the forest with current parameters."""
        build_params = {**self.params, **kwargs}
        quantile = build_params.pop("quantile")
        return RandomForestQuantileRegressor(default_quantiles=quantile, **build_params)

    def fit(self, features: pd.DataFrame, target: pd.Series, **kwargs: Any) -> "QuantileForestModel":
        """Fit the forest on the training rows."""
        self._model = self.build_model()
        self._model.fit(features, np.asarray(target, dtype=float), **kwargs)
        return self

    def predict(self, features: pd.DataFrame, **kwargs: Any) -> np.ndarray:
        """Predict the configured quantile for each row."""
        self._check_fitted()
        quantile = kwargs.pop("quantile", self.params["quantile"])
        predictions = self._model.predict(features, quantiles=quantile, **kwargs)
        return np.asarray(predictions, dtype=float).ravel()

    def predict_quantiles(
        self,
        features: pd.DataFrame,
        quantiles: Sequence[float] = (0.05, 0.5, 0.95),
    ) -> pd.DataFrame:
        """
        Predict several quantiles at once.

        Returns:
            DataFrame with one column per quantile (named like ``q0.05``),
            indexed like ``features``
        """
        self._check_fitted()
        values = np.asarray(self._model.predict(features, quantiles=list(quantiles)), dtype=float)
        values = values.reshape(len(features), len(quantiles))
        return pd.DataFrame(values, index=features.index, columns=[f"q{q:g}" for q in quantiles])

    def __repr__(self) -> str:
        q = self.params.get("quantile", 0.5)
        n_est = self.params.get("n_estimators", 500)
        leaf = self.params.get("min_samples_leaf", 1)
        return f"QuantileForest(q={q}, n_est={n_est}, min_leaf={leaf})"


# ══════════════════════════════════════════════════════════════════════════════
# EXPORTS
# ══════════════════════════════════════════════════════════════════════════════

__all__ = ["QuantileForestModel"]
