"""Tests for descriptive statistics, stationarity checks and report figures."""

from __future__ import annotations

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure

from btcml.evaluation.describe import (
    correlation_matrix,
    describe_table,
    perform_adf_test,
    target_correlations,
)
from btcml.evaluation.plot import plot_correlation_heatmap, plot_forecast_vs_actual, plot_price_history


def _create_table(rows: int = 200) -> pd.DataFrame:
    rng = np.random.default_rng(5)
    price = 1000 + np.cumsum(rng.normal(0, 10, rows))
    return pd.DataFrame({
        "date": pd.date_range("2017-01-01", periods=rows, freq="D"),
        "market_price": price,
        "hash_rate": price * 2 + rng.normal(0, 1, rows),
        "gold_usd": rng.normal(1200, 5, rows),
    })


class TestDescribeTable:
    def test_one_row_per_numeric_column(self) -> None:
        summary = describe_table(_create_table())
        assert list(summary.index) == ["market_price", "hash_rate", "gold_usd"]
        assert {"mean", "std", "missing", "missing_pct"} <= set(summary.columns)

    def test_missing_counts(self) -> None:
        table = _create_table(10)
        table.loc[:4, "gold_usd"] = np.nan

        summary = describe_table(table, columns=["gold_usd"])

        assert summary.loc["gold_usd", "missing"] == 5
        assert summary.loc["gold_usd", "missing_pct"] == 50.0

    def test_no_numeric_columns(self) -> None:
        assert describe_table(pd.DataFrame({"date": pd.date_range("2017-01-01", periods=3)})).empty


class TestCorrelations:
    def test_matrix_is_symmetric(self) -> None:
        corr = correlation_matrix(_create_table())
        np.testing.assert_allclose(corr.values, corr.values.T)
        np.testing.assert_allclose(np.diag(corr.values), 1.0)

    def test_target_correlations_sorted_by_strength(self) -> None:
        corr = target_correlations(_create_table(), "market_price")
        assert "market_price" not in corr.index
        assert corr.index[0] == "hash_rate"
        assert corr.iloc[0] > 0.99

    def test_spearman(self) -> None:
        corr = correlation_matrix(_create_table(), method="spearman", columns=["market_price", "hash_rate"])
        assert corr.shape == (2, 2)


class TestAdf:
    def test_random_walk_not_stationary_but_difference_is(self) -> None:
        rng = np.random.default_rng(1)
        price = pd.Series(1000 + np.cumsum(rng.normal(5, 10, 500)))

        level = perform_adf_test(price)
        diff = perform_adf_test(price.diff())

        assert not level["is_stationary"]
        assert diff["is_stationary"]

    def test_short_series(self) -> None:
        assert "error" in perform_adf_test(pd.Series(np.arange(10.0)))

    def test_constant_series(self) -> None:
        assert "constant" in perform_adf_test(pd.Series(np.full(50, 3.0)))["error"]


class TestPlots:
    def test_price_history(self) -> None:
        fig = plot_price_history(_create_table(), "market_price", log_scale=True)
        assert isinstance(fig, Figure)
        assert fig.axes[0].get_yscale() == "log"

    def test_heatmap(self) -> None:
        fig = plot_correlation_heatmap(correlation_matrix(_create_table()), title="corr")
        assert isinstance(fig, Figure)
        assert fig.axes[0].get_title() == "corr"

    def test_forecast_vs_actual_with_band(self) -> None:
        table = _create_table(20)
        intervals = pd.DataFrame({"q0.05": table["market_price"] - 5, "q0.95": table["market_price"] + 5})

        fig = plot_forecast_vs_actual(
            table["date"],
            table["market_price"],
            {"GradientBoosting": table["market_price"].to_numpy() + 1},
            intervals=intervals,
        )

        labels = [line.get_label() for line in fig.axes[0].get_lines()]
        assert labels == ["observed", "GradientBoosting"]

    @pytest.fixture(autouse=True)
    def _close_figures(self):
        yield
        plt.close("all")
