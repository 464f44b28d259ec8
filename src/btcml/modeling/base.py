"""
Abstract Base Model for Bitcoin price regression and forecasting.

This module provides the BaseModel ABC that all models must inherit.
It ensures a consistent fit/predict contract across the feature-based
regressors (gradient boosting, quantile random forest) and the univariate
ARIMA forecaster, so the training pipeline can treat model choice as a
pluggable strategy.

Example:
    >>> class MyModel(BaseModel):
    ...     name = "MyModel"
    ...     default_params = {"alpha": 1.0}
    ...
    ...     def build_model(self, **kwargs):
    ...         return Ridge(**self.params)
    ...
    ...     def fit(self, features, target, **kwargs):
    ...         self._model = self.build_model()
    ...         self._model.fit(features, target)
    ...         return self
    ...
    ...     def predict(self, features, **kwargs):
    ...         return self._model.predict(features)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np
import pandas as pd


# ══════════════════════════════════════════════════════════════════════════════
# BASE MODEL ABC
# ══════════════════════════════════════════════════════════════════════════════


class BaseModel(ABC):
    """
    Abstract Base Class for all models.

    This class defines the interface that all models must implement:
    - Training: fit(features, target) -> self
    - Prediction: predict(features) -> array with one value per feature row

    Attributes:
        name: Unique model identifier (e.g., 'GradientBoosting', 'ARIMA')
        default_params: Default hyperparameters for the model
        uses_features: Whether the model reads the feature columns
        params: Current model parameters (set in __init__ of subclass)
        _model: Internal estimator instance (set in fit)

    Example:
        >>> model = GradientBoostingModel(n_estimators=300)
        >>> model.fit(train_X, train_y)
        >>> predictions = model.predict(test_X)
    """

    # ══════════════════════════════════════════════════════════════════════════
    # ABSTRACT PROPERTIES (must be overridden)
    # ══════════════════════════════════════════════════════════════════════════

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique name of the model.

        This is used for logging, the model registry, and artifact paths.
        """

    @property
    @abstractmethod
    def default_params(self) -> Dict[str, Any]:
        """
        Default hyperparameters for the model.

        These are used when no parameters are provided to __init__.
        """

    # ══════════════════════════════════════════════════════════════════════════
    # OPTIONAL PROPERTIES (with defaults)
    # ══════════════════════════════════════════════════════════════════════════

    @property
    def uses_features(self) -> bool:
        """
        Whether the model reads the feature columns.

        Univariate forecasters override this with False: they learn from the
        target history only and use the feature frame just for its length.
        """
        return True

    # ══════════════════════════════════════════════════════════════════════════
    # ABSTRACT METHODS (must be implemented)
    # ══════════════════════════════════════════════════════════════════════════

    @abstractmethod
    def build_model(self, **kwargs: Any) -> Any:
        """
        Create and configure the underlying estimator.

        Args:
            **kwargs: Override parameters for this build

        Returns:
            Unfitted estimator instance
        """

    @abstractmethod
    def fit(self, features: pd.DataFrame, target: pd.Series, **kwargs: Any) -> "BaseModel":
        """
        Train the model.

        Args:
            features: Training feature rows, in chronological order
            target: Target values aligned with ``features``

        Returns:
            self (for method chaining)
        """

    @abstractmethod
    def predict(self, features: pd.DataFrame, **kwargs: Any) -> np.ndarray:
        """
        Predict one value per row of ``features``.

        Raises:
            ValueError: If model has not been fitted
        """

    # ══════════════════════════════════════════════════════════════════════════
    # CONCRETE METHODS (standard implementations)
    # ══════════════════════════════════════════════════════════════════════════

    @property
    def is_fitted(self) -> bool:
        return getattr(self, "_model", None) is not None

    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise ValueError("Model must be fitted before predicting. Call fit() first.")

    def get_params(self) -> Dict[str, Any]:
        """Get the current model parameters."""
        return getattr(self, "params", {})

    def set_params(self, **params: Any) -> "BaseModel":
        """Update parameters and drop any fitted estimator; call fit() again afterwards."""
        self.params = {**self.get_params(), **params}
        self._model = None
        return self

    def clone(self) -> "BaseModel":
        """Unfitted copy with the same parameters."""
        return type(self)(**self.get_params())

    def __repr__(self) -> str:
        """String representation of the model."""
        params_str = ", ".join(f"{k}={v}" for k, v in self.get_params().items())
        return f"{self.name}({params_str})"


# ══════════════════════════════════════════════════════════════════════════════
# EXPORTS
# ══════════════════════════════════════════════════════════════════════════════

__all__ = ["BaseModel"]
