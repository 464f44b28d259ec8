"""Gradient boosting regressor for the Bitcoin market price."""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from xgboost import XGBRegressor

from btcml.utils import get_logger

from .base import BaseModel

logger = get_logger("modeling.gradient_boosting")


class GradientBoostingModel(BaseModel):
    """
    Gradient boosted trees on the same-day feature columns.

    Wraps ``xgboost.XGBRegressor``. Missing feature values are handled
    natively by XGBoost, but the pipeline normalises them beforehand.

    Args:
        n_estimators: Number of boosting rounds
        max_depth: Max tree depth
        learning_rate: Step size shrinkage
        subsample: Row sampling ratio
        colsample_bytree: Column sampling ratio
        reg_alpha: L1 regularization
        reg_lambda: L2 regularization
        random_state: Seed for the row/column sampling
    """

    @property
    def name(self) -> str:
        return "GradientBoosting"

    @property
    def default_params(self) -> Dict[str, Any]:
        return {
            "n_estimators": 300, "max_depth": 4, "learning_rate": 0.05,
            "subsample": 0.8, "colsample_bytree": 0.8, "reg_alpha": 0.0,
            "reg_lambda": 1.0, "random_state": 42,
        }

    def __init__(
        self,
        n_estimators: int = 300,
        max_depth: int = 4,
        learning_rate: float = 0.05,
        subsample: float = 0.8,
        colsample_bytree: float = 0.8,
        reg_alpha: float = 0.0,
        reg_lambda: float = 1.0,
        random_state: int = 42,
        **kwargs: Any,
    ) -> None:
        self.params: Dict[str, Any] = {
            "n_estimators": n_estimators, "max_depth": max_depth,
            "learning_rate": learning_rate, "subsample": subsample,
            "colsample_bytree": colsample_bytree, "reg_alpha": reg_alpha,
            "reg_lambda": reg_lambda, "random_state": random_state, **kwargs,
        }
        self._model: Optional[XGBRegressor] = None

    def build_model(self, **kwargs: Any) -> XGBRegressor:
        build_params = {"objective": "reg:squarederror", **self.params, **kwargs}
        return XGBRegressor(**build_params)

    def fit(self, features: pd.DataFrame, target: pd.Series, **kwargs: Any) -> "GradientBoostingModel":
        self._model = self.build_model()
        self._model.fit(features, target, **kwargs)
        logger.debug(f"Fitted {self!r} on {len(features)} rows x {features.shape[1]} features")
        return self

    def predict(self, features: pd.DataFrame, **kwargs: Any) -> np.ndarray:
        self._check_fitted()
        return np.asarray(self._model.predict(features, **kwargs), dtype=float)

    def feature_importances(self) -> pd.Series:
        """Gain-based importances indexed by feature name, largest first."""
        self._check_fitted()
        names = getattr(self._model, "feature_names_in_", None)
        importances = pd.Series(self._model.feature_importances_, index=names)
        return importances.sort_values(ascending=False)

    def __repr__(self) -> str:
        n_est = self.params.get("n_estimators", 300)
        depth = self.params.get("max_depth", 4)
        lr = self.params.get("learning_rate", 0.05)
        return f"GradientBoosting(n_est={n_est}, depth={depth}, lr={lr})"


__all__ = ["GradientBoostingModel"]
