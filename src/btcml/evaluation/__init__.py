"""Evaluation utilities: splitting, rolling-origin folds, backtests and descriptive statistics."""

from .backtest import BacktestResult, FoldResult, backtest_multiple_models, rolling_origin_backtest
from .describe import correlation_matrix, describe_table, perform_adf_test, target_correlations
from .rolling_origin import Fold, RollingOrigin, Window, rolling_origin_folds
from .split import Split, chronological_split, split_point

__all__ = [
    "BacktestResult",
    "Fold",
    "FoldResult",
    "RollingOrigin",
    "Split",
    "Window",
    "backtest_multiple_models",
    "chronological_split",
    "correlation_matrix",
    "describe_table",
    "perform_adf_test",
    "rolling_origin_backtest",
    "rolling_origin_folds",
    "split_point",
    "target_correlations",
]
