"""
BTCML Modeling Module.

This module provides the model framework behind the uniform
fit(features, target) / predict(features) contract:
- BaseModel: Abstract base class for all models
- GradientBoostingModel: XGBoost gradient boosted trees
- QuantileForestModel: Quantile Random Forest (median + intervals)
- ARIMAModel: Univariate ARIMA(p, 1, q) with automatic order search

Example:
    >>> from btcml.modeling import get_model
    >>>
    >>> model = get_model("QuantileForest")(min_samples_leaf=5)
    >>> model.fit(split.train[features], split.train["market_price"])
    >>> predictions = model.predict(split.test[features])
"""

from .arima import ARIMAModel
from .artifacts import Artifact, find_artifact, list_artifacts, load_metadata, load_model, persist_model
from .base import BaseModel
from .gradient_boosting import GradientBoostingModel
from .quantile_forest import QuantileForestModel
from .registry import get_default_grid, get_model, list_models, register_model

__all__ = [
    "BaseModel",
    "ARIMAModel",
    "GradientBoostingModel",
    "QuantileForestModel",
    "get_default_grid",
    "get_model",
    "list_models",
    "register_model",
    "Artifact",
    "find_artifact",
    "list_artifacts",
    "load_metadata",
    "load_model",
    "persist_model",
]
