"""
Tests for the btcml.modeling package.

These tests cover:
- GradientBoostingModel, QuantileForestModel and ARIMAModel fit/predict
- The shared BaseModel contract (params, clone, unfitted errors)
- Quantile intervals from the forest
- The model registry and default grids
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from btcml.modeling import (
    ARIMAModel,
    BaseModel,
    GradientBoostingModel,
    QuantileForestModel,
    get_default_grid,
    get_model,
    list_models,
    register_model,
)
from btcml.modeling.arima import series_from_target


# ══════════════════════════════════════════════════════════════════════════════
# FIXTURES & HELPERS
# ══════════════════════════════════════════════════════════════════════════════


def _create_regression_data(rows: int = 200, seed: int = 7) -> tuple[pd.DataFrame, pd.Series]:
    """Price-like target driven by two features plus noise."""
    rng = np.random.default_rng(seed)
    hash_rate = np.linspace(1.0, 50.0, rows) + rng.normal(0, 0.5, rows)
    volume = rng.uniform(10, 20, rows)
    price = 200 * hash_rate + 30 * volume + rng.normal(0, 5, rows)
    features = pd.DataFrame({"hash_rate": hash_rate, "trade_volume": volume})
    return features, pd.Series(price, name="market_price")


def _create_random_walk(rows: int = 150, seed: int = 3) -> pd.Series:
    rng = np.random.default_rng(seed)
    return pd.Series(1000 + np.cumsum(rng.normal(1.0, 5.0, rows)), name="market_price")


# ══════════════════════════════════════════════════════════════════════════════
# GRADIENT BOOSTING
# ══════════════════════════════════════════════════════════════════════════════


class TestGradientBoostingModel:
    def test_defaults(self) -> None:
        model = GradientBoostingModel()
        assert model.name == "GradientBoosting"
        assert model.params == model.default_params
        assert model.uses_features

    def test_fit_predict_shape(self) -> None:
        X, y = _create_regression_data()
        model = GradientBoostingModel(n_estimators=50, max_depth=3).fit(X[:150], y[:150])

        predictions = model.predict(X[150:])

        assert predictions.shape == (50,)
        assert np.isfinite(predictions).all()

    def test_learns_signal(self) -> None:
        X, y = _create_regression_data()
        model = GradientBoostingModel(n_estimators=200).fit(X, y)
        residual = np.abs(model.predict(X) - y.to_numpy())
        assert residual.mean() < y.std()

    def test_feature_importances(self) -> None:
        X, y = _create_regression_data()
        model = GradientBoostingModel(n_estimators=50).fit(X, y)

        importances = model.feature_importances()

        assert set(importances.index) == {"hash_rate", "trade_volume"}
        assert importances.index[0] == "hash_rate"

    def test_deterministic_with_seed(self) -> None:
        X, y = _create_regression_data()
        first = GradientBoostingModel(n_estimators=30).fit(X, y).predict(X)
        second = GradientBoostingModel(n_estimators=30).fit(X, y).predict(X)
        np.testing.assert_allclose(first, second)

    def test_predict_before_fit(self) -> None:
        X, _ = _create_regression_data(10)
        with pytest.raises(ValueError, match="fitted"):
            GradientBoostingModel().predict(X)


# ══════════════════════════════════════════════════════════════════════════════
# QUANTILE FOREST
# ══════════════════════════════════════════════════════════════════════════════


class TestQuantileForestModel:
    def test_defaults(self) -> None:
        model = QuantileForestModel()
        assert model.name == "QuantileForest"
        assert model.params["quantile"] == 0.5

    @pytest.mark.parametrize("quantile", [0.0, 1.0, 1.5])
    def test_invalid_quantile(self, quantile: float) -> None:
        with pytest.raises(ValueError, match="quantile"):
            QuantileForestModel(quantile=quantile)

    def test_fit_predict_shape(self) -> None:
        X, y = _create_regression_data()
        model = QuantileForestModel(n_estimators=50).fit(X[:150], y[:150])

        predictions = model.predict(X[150:])

        assert predictions.shape == (50,)
        assert np.isfinite(predictions).all()

    def test_quantile_bands_are_ordered(self) -> None:
        X, y = _create_regression_data()
        model = QuantileForestModel(n_estimators=50, min_samples_leaf=5).fit(X[:150], y[:150])

        bands = model.predict_quantiles(X[150:], quantiles=(0.05, 0.5, 0.95))

        assert list(bands.columns) == ["q0.05", "q0.5", "q0.95"]
        assert bands.index.equals(X[150:].index)
        assert (bands["q0.05"] <= bands["q0.5"]).all()
        assert (bands["q0.5"] <= bands["q0.95"]).all()

    def test_predict_other_quantile(self) -> None:
        X, y = _create_regression_data()
        model = QuantileForestModel(n_estimators=50, min_samples_leaf=5).fit(X, y)
        low = model.predict(X, quantile=0.1)
        high = model.predict(X, quantile=0.9)
        assert (low <= high).all()

    def test_predict_before_fit(self) -> None:
        X, _ = _create_regression_data(10)
        with pytest.raises(ValueError):
            QuantileForestModel().predict_quantiles(X)


# ══════════════════════════════════════════════════════════════════════════════
# ARIMA
# ══════════════════════════════════════════════════════════════════════════════


class TestARIMAModel:
    def test_defaults(self) -> None:
        model = ARIMAModel()
        assert model.name == "ARIMA"
        assert model.params["d"] == 1
        assert not model.uses_features
        assert repr(model) == "ARIMA(p<=5,1,q<=5)"

    def test_forecast_length_follows_features(self) -> None:
        y = _create_random_walk()
        features = pd.DataFrame(index=range(len(y)))
        model = ARIMAModel(max_p=2, max_q=2).fit(features[:120], y[:120])

        forecast = model.predict(features[120:])

        assert forecast.shape == (30,)
        assert np.isfinite(forecast).all()

    def test_offset_skips_leading_steps(self) -> None:
        y = _create_random_walk()
        features = pd.DataFrame(index=range(10))
        model = ARIMAModel(max_p=2, max_q=2).fit(features, y[:120])

        full = model.predict(pd.DataFrame(index=range(15)))
        shifted = model.predict(features, offset=5)

        np.testing.assert_allclose(shifted, full[5:])

    def test_empty_horizon(self) -> None:
        y = _create_random_walk()
        model = ARIMAModel(max_p=1, max_q=1).fit(None, y)
        assert model.predict(pd.DataFrame()).shape == (0,)

    def test_missing_target_rejected(self) -> None:
        y = _create_random_walk(30)
        y.iloc[5] = np.nan
        with pytest.raises(ValueError, match="missing"):
            series_from_target(y)

    def test_predict_before_fit(self) -> None:
        with pytest.raises(ValueError):
            ARIMAModel().predict(pd.DataFrame(index=range(3)))


# ══════════════════════════════════════════════════════════════════════════════
# BASE MODEL CONTRACT
# ══════════════════════════════════════════════════════════════════════════════


class TestBaseModelContract:
    @pytest.mark.parametrize("model_cls", [GradientBoostingModel, QuantileForestModel, ARIMAModel])
    def test_is_base_model(self, model_cls) -> None:
        assert issubclass(model_cls, BaseModel)

    def test_abstract_base_cannot_instantiate(self) -> None:
        with pytest.raises(TypeError):
            BaseModel()

    def test_set_params_resets_fit(self) -> None:
        X, y = _create_regression_data(60)
        model = GradientBoostingModel(n_estimators=10).fit(X, y)
        assert model.is_fitted

        model.set_params(max_depth=2)

        assert not model.is_fitted
        assert model.get_params()["max_depth"] == 2
        assert model.get_params()["n_estimators"] == 10

    def test_clone_is_unfitted_copy(self) -> None:
        X, y = _create_regression_data(60)
        model = QuantileForestModel(n_estimators=10, min_samples_leaf=3).fit(X, y)

        copy = model.clone()

        assert type(copy) is QuantileForestModel
        assert copy.get_params() == model.get_params()
        assert not copy.is_fitted


# ══════════════════════════════════════════════════════════════════════════════
# REGISTRY
# ══════════════════════════════════════════════════════════════════════════════


class TestModelRegistry:
    def test_builtin_models(self) -> None:
        assert {"GradientBoosting", "QuantileForest", "ARIMA"} <= set(list_models())

    def test_get_model(self) -> None:
        assert get_model("ARIMA") is ARIMAModel
        assert get_model(" QuantileForest ") is QuantileForestModel

    def test_unknown_model(self) -> None:
        with pytest.raises(KeyError):
            get_model("Prophet")

    def test_default_grid_is_a_copy(self) -> None:
        grid = get_default_grid("GradientBoosting")
        grid["max_depth"] = [99]
        assert get_default_grid("GradientBoosting")["max_depth"] == [3, 5]

    def test_register_requires_base_model(self) -> None:
        with pytest.raises(TypeError):
            register_model("NotAModel", dict)

    def test_register_custom_model(self) -> None:
        register_model("ShallowBoosting", GradientBoostingModel, {"max_depth": [1, 2]})
        assert get_model("ShallowBoosting") is GradientBoostingModel
        assert get_default_grid("ShallowBoosting") == {"max_depth": [1, 2]}
