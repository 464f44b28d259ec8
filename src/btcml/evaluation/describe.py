"""Descriptive statistics, correlation matrices and stationarity checks."""

from __future__ import annotations

from typing import Literal, Optional, Sequence

import pandas as pd
from statsmodels.tsa.stattools import adfuller

CorrelationMethod = Literal["pearson", "spearman", "kendall"]


def describe_table(frame: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Summary statistics per numeric column, plus missing-value counts.

    Returns one row per column (count, mean, std, min, quartiles, max,
    missing, missing_pct).
    """
    numeric = frame[list(columns)] if columns is not None else frame.select_dtypes("number")
    if numeric.shape[1] == 0:
        return pd.DataFrame()
    summary = numeric.describe().T
    summary["missing"] = numeric.isna().sum()
    summary["missing_pct"] = (numeric.isna().mean() * 100).round(2)
    return summary


def correlation_matrix(
    frame: pd.DataFrame,
    method: CorrelationMethod = "pearson",
    columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Pairwise correlation of the numeric columns."""
    numeric = frame[list(columns)] if columns is not None else frame.select_dtypes("number")
    return numeric.corr(method=method)


def target_correlations(frame: pd.DataFrame, target: str, method: CorrelationMethod = "pearson") -> pd.Series:
    """Correlation of every numeric column with ``target``, strongest first (target excluded)."""
    corr = correlation_matrix(frame, method=method)[target].drop(labels=[target])
    return corr.reindex(corr.abs().sort_values(ascending=False).index)


def perform_adf_test(series: pd.Series) -> dict:
    """
    Perform the Augmented Dickey-Fuller test on a pandas Series.

    Returns a dictionary with the results.
    """
    # Remove NaN values as they can break the test
    series = series.dropna()

    if len(series) < 20:
        return {
            "error": "Series too short for reliable ADF test (min 20 samples required)."
        }

    # Check for constant series (no variance)
    if series.nunique(dropna=True) <= 1 or series.std() == 0:
        return {
            "error": "Series is constant (no variance). ADF test requires varying data."
        }

    try:
        result = adfuller(series)
    except ValueError as exc:
        return {
            "error": f"ADF test failed: {exc}"
        }

    return {
        "adf_statistic": result[0],
        "p_value": result[1],
        "used_lag": result[2],
        "n_obs": result[3],
        "critical_values": result[4],
        "icbest": result[5] if len(result) > 5 else None,
        "is_stationary": result[1] < 0.05
    }


__all__ = [
    "correlation_matrix",
    "describe_table",
    "perform_adf_test",
    "target_correlations",
]
