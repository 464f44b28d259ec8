"""
ARIMA Model for the Bitcoin market price.

ARIMA (AutoRegressive Integrated Moving Average) is a classic statistical
model for time series forecasting. It combines:
- AR (AutoRegressive): Uses past values to predict future values
- I (Integrated): Differencing to make the series stationary
- MA (Moving Average): Uses past forecast errors

The differencing order is fixed at d=1 (the price series is not stationary,
its first difference is); p and q are searched automatically by Darts'
AutoARIMA up to ``max_p`` / ``max_q``.

Example:
    >>> model = ARIMAModel(max_p=5, max_q=5)
    >>> model.fit(train_X, train_y)          # train_X is only used for its length
    >>> forecast = model.predict(test_X)      # len(test_X) steps ahead
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from darts import TimeSeries
from darts.models import AutoARIMA

from .base import BaseModel


def series_from_target(target: pd.Series) -> TimeSeries:
    """
    Build a Darts TimeSeries from the target values.

    The daily table can have calendar gaps where a source skipped a day, so
    the series is indexed by position rather than by date.
    """
    values = np.asarray(target, dtype=float)
    if np.isnan(values).any():
        raise ValueError("ARIMA target contains missing values; normalise the table first.")
    return TimeSeries.from_values(values)


class ARIMAModel(BaseModel):
    """
    Univariate ARIMA(p, 1, q) with automatic order search.

    This model wraps Darts' AutoARIMA and provides the same fit/predict
    contract as the feature-based regressors. It ignores the feature
    columns: ``fit`` learns from the target history and ``predict`` forecasts
    ``len(features)`` steps past the end of the training window.

    Parameters:
        d: Differencing order (fixed at 1 by default)
        max_p: Upper bound of the AR order search
        max_q: Upper bound of the MA order search
        seasonal: Whether to search seasonal terms as well

    Attributes:
        name: "ARIMA"
        uses_features: False

    Note:
        ARIMA is a LocalForecastingModel in Darts: each fold refits it on
        its own training window.
    """

    @property
    def name(self) -> str:
        """Model name for logging and identification."""
        return "ARIMA"

    @property
    def default_params(self) -> Dict[str, Any]:
        """Default ARIMA search constraints."""
        return {
            "d": 1,
            "max_p": 5,
            "max_q": 5,
            "seasonal": False,
        }

    @property
    def uses_features(self) -> bool:
        return False

    def __init__(
        self,
        d: int = 1,
        max_p: int = 5,
        max_q: int = 5,
        seasonal: bool = False,
        **kwargs: Any,
    ) -> None:
        """
        Initialize ARIMA model.

        Args:
            d: Differencing order. How many times to difference the series.
            max_p: Largest AR order tried by the search.
            max_q: Largest MA order tried by the search.
            seasonal: Search seasonal orders too.
            **kwargs: Additional arguments passed to Darts AutoARIMA.
        """
        self.params: Dict[str, Any] = {
            "d": d,
            "max_p": max_p,
            "max_q": max_q,
            "seasonal": seasonal,
            **kwargs,
        }
        self._model: Optional[AutoARIMA] = None

    def build_model(self, **kwargs: Any) -> AutoARIMA:
        """Build the Darts AutoARIMA model with current parameters."""
        build_params = {**self.params, **kwargs}
        return AutoARIMA(**build_params)

    def fit(self, features: pd.DataFrame, target: pd.Series, **kwargs: Any) -> "ARIMAModel":
        """
        Fit on the target history.

        Args:
            features: Ignored (kept for the common contract).
            target: Training target values in chronological order.
        """
        self._model = self.build_model()
        self._model.fit(series_from_target(target))
        return self

    def predict(self, features: pd.DataFrame, **kwargs: Any) -> np.ndarray:
        """
        Forecast ``len(features)`` steps after the training window.

        Args:
            features: Frame whose length sets the forecast horizon.
            offset: Steps to skip before the first returned forecast, for
                validation windows that start after a gap (default: 0).

        Raises:
            ValueError: If model has not been fitted.
        """
        self._check_fitted()
        offset = int(kwargs.pop("offset", 0))
        horizon = len(features)
        if horizon == 0:
            return np.empty(0, dtype=float)
        forecast = self._model.predict(n=offset + horizon, **kwargs)
        return forecast.values().ravel()[offset:]

    def __repr__(self) -> str:
        """String representation with ARIMA notation."""
        d = self.params.get("d", 1)
        max_p = self.params.get("max_p", 5)
        max_q = self.params.get("max_q", 5)
        return f"ARIMA(p<={max_p},{d},q<={max_q})"


# ══════════════════════════════════════════════════════════════════════════════
# EXPORTS
# ══════════════════════════════════════════════════════════════════════════════

__all__ = ["ARIMAModel", "series_from_target"]
