"""Tests for rolling-origin backtesting.

This test suite verifies:
- rolling_origin_backtest scores every fold
- No data leakage: each fold is fitted on its own training rows only
- Univariate models forecast across the gap into the validation window
- Multiple models can be backtested on the same folds
"""

from __future__ import annotations

from typing import Any, Dict, List

import numpy as np
import pandas as pd
import pytest

from btcml.evaluation.backtest import (
    BacktestResult,
    backtest_multiple_models,
    rolling_origin_backtest,
)
from btcml.evaluation.rolling_origin import rolling_origin_folds
from btcml.modeling import ARIMAModel, BaseModel, GradientBoostingModel


def _create_data(rows: int = 120) -> tuple[pd.DataFrame, pd.Series]:
    """Simple table: the target is a noisy linear function of one feature."""
    rng = np.random.default_rng(11)
    x = np.linspace(0, 10, rows)
    features = pd.DataFrame({"hash_rate": x, "noise": rng.normal(size=rows)})
    target = pd.Series(5 * x + rng.normal(0, 0.1, rows), name="market_price")
    return features, target


class RecordingModel(BaseModel):
    """Predicts the training mean and records which rows it was fitted on."""

    fitted_indices: List[List[int]] = []

    @property
    def name(self) -> str:
        return "Recording"

    @property
    def default_params(self) -> Dict[str, Any]:
        return {}

    def __init__(self, **params: Any) -> None:
        self.params = dict(params)
        self._model = None

    def build_model(self, **kwargs: Any) -> float:
        return 0.0

    def fit(self, features: pd.DataFrame, target: pd.Series, **kwargs: Any) -> "RecordingModel":
        RecordingModel.fitted_indices.append(list(features.index))
        self._model = float(target.mean())
        return self

    def predict(self, features: pd.DataFrame, **kwargs: Any) -> np.ndarray:
        self._check_fitted()
        return np.full(len(features), self._model)


@pytest.fixture(autouse=True)
def _reset_recorder() -> None:
    RecordingModel.fitted_indices = []


class TestRollingOriginBacktest:
    """Tests for rolling_origin_backtest."""

    def test_returns_backtest_result(self) -> None:
        features, target = _create_data()
        folds = rolling_origin_folds(len(features), initial_window=60, horizon=20, skip=20)

        result = rolling_origin_backtest(RecordingModel, {}, features, target, folds)

        assert isinstance(result, BacktestResult)
        assert result.model_name == "Recording"
        assert result.n_folds == len(folds) == 3

    def test_no_data_leakage(self) -> None:
        """Every fold is fitted only on rows before its validation window."""
        features, target = _create_data()
        folds = rolling_origin_folds(len(features), initial_window=60, horizon=20, skip=20)

        rolling_origin_backtest(RecordingModel, {}, features, target, folds)

        assert len(RecordingModel.fitted_indices) == len(folds)
        for fold, seen in zip(folds, RecordingModel.fitted_indices):
            assert seen == list(range(fold.train.start, fold.train.stop))
            assert max(seen) < fold.validation.start

    def test_fold_metrics_table(self) -> None:
        features, target = _create_data()
        folds = rolling_origin_folds(len(features), initial_window=60, horizon=20, skip=20)

        result = rolling_origin_backtest(RecordingModel, {}, features, target, folds, metric_names=["rmse", "mae"])

        table = result.fold_metrics
        assert list(table.columns) == ["rmse", "mae"]
        assert list(table.index) == [0, 1, 2]
        assert result.mean_metrics["rmse"] == pytest.approx(table["rmse"].mean())

    def test_undefined_metric_left_out_of_mean(self) -> None:
        features, _ = _create_data(100)
        target = pd.Series(np.r_[np.arange(60.0), np.full(40, 7.0)])
        folds = rolling_origin_folds(100, initial_window=60, horizon=20, skip=20)

        result = rolling_origin_backtest(RecordingModel, {}, features, target, folds, metric_names=["rmse", "r2"])

        assert all(r.metrics["r2"] is None for r in result.fold_results)
        assert result.mean_metrics["r2"] is None
        assert result.mean_metrics["rmse"] is not None

    def test_length_mismatch(self) -> None:
        features, target = _create_data()
        folds = rolling_origin_folds(len(features), initial_window=60, horizon=20, skip=20)
        with pytest.raises(ValueError, match="length"):
            rolling_origin_backtest(RecordingModel, {}, features, target[:-1], folds)

    def test_no_folds(self) -> None:
        features, target = _create_data()
        result = rolling_origin_backtest(RecordingModel, {}, features, target, [])
        assert result.n_folds == 0
        assert result.mean_metrics == {"rmse": None, "r2": None, "mae": None}

    def test_gradient_boosting_beats_mean(self) -> None:
        features, target = _create_data(200)
        folds = rolling_origin_folds(200, initial_window=120, horizon=20, skip=30, fixed_window=False)

        boosted = rolling_origin_backtest(GradientBoostingModel, {"n_estimators": 50}, features, target, folds)
        baseline = rolling_origin_backtest(RecordingModel, {}, features, target, folds)

        assert boosted.params == {"n_estimators": 50}
        assert boosted.mean_metrics["mae"] < baseline.mean_metrics["mae"]


class TestUnivariateBacktest:
    def test_arima_with_gap(self) -> None:
        features, target = _create_data(150)
        folds = rolling_origin_folds(150, initial_window=80, horizon=10, skip=30, gap=5)

        result = rolling_origin_backtest(ARIMAModel, {"max_p": 1, "max_q": 1}, features, target, folds)

        assert result.n_folds == len(folds)
        assert all(r.metrics["rmse"] is not None for r in result.fold_results)


class TestBacktestMultipleModels:
    def test_one_result_per_spec(self) -> None:
        features, target = _create_data()
        folds = rolling_origin_folds(len(features), initial_window=60, horizon=20, skip=20)

        results = backtest_multiple_models(
            [
                {"class": RecordingModel},
                {"class": GradientBoostingModel, "params": {"n_estimators": 20}},
            ],
            features,
            target,
            folds,
        )

        assert [r.model_name for r in results] == ["Recording", "GradientBoosting"]
        assert all(r.n_folds == len(folds) for r in results)
