from __future__ import annotations

from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure


def plot_price_history(frame: pd.DataFrame, column: str, date_column: str = "date", title=None, log_scale=False) -> Figure:
    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(frame[date_column], frame[column], linewidth=1)
    if log_scale:
        ax.set_yscale("log")
    ax.set_xlabel("Date")
    ax.set_ylabel(column)
    ax.set_title(title or column)
    ax.grid(alpha=0.3)
    fig.autofmt_xdate()
    fig.tight_layout()
    return fig


def plot_correlation_heatmap(corr: pd.DataFrame, title=None, cmap="coolwarm", annotate=True) -> Figure:
    size = max(6, 0.6 * len(corr.columns) + 2)
    fig, ax = plt.subplots(figsize=(size, size))

    im = ax.imshow(corr.values, aspect="auto", interpolation="none", cmap=cmap, vmin=-1, vmax=1)
    ticks = np.arange(len(corr.columns))
    ax.set_xticks(ticks, labels=corr.columns, rotation=90)
    ax.set_yticks(ticks, labels=corr.index)

    # Annotating large matrices makes them unreadable
    if annotate and len(corr.columns) <= 15:
        for i in range(len(corr.index)):
            for j in range(len(corr.columns)):
                value = corr.values[i, j]
                if not np.isnan(value):
                    ax.text(j, i, f"{value:.2f}", ha="center", va="center", fontsize=7)

    if title is not None:
        ax.set_title(title)
    cbar = fig.colorbar(im)
    cbar.set_label("correlation")
    fig.tight_layout()
    return fig


def plot_forecast_vs_actual(
    dates: Sequence,
    actual: Sequence[float],
    predictions: dict,
    title: Optional[str] = None,
    intervals: Optional[pd.DataFrame] = None,
) -> Figure:
    """Observed test values against each model's predictions; optional lower/upper band."""
    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(dates, actual, color="black", linewidth=1.5, label="observed")
    for name, values in predictions.items():
        ax.plot(dates, values, linewidth=1, label=name)
    if intervals is not None and intervals.shape[1] >= 2:
        lower = intervals.iloc[:, 0].to_numpy()
        upper = intervals.iloc[:, -1].to_numpy()
        ax.fill_between(dates, lower, upper, alpha=0.2, label=f"{intervals.columns[0]}-{intervals.columns[-1]}")
    ax.set_xlabel("Date")
    ax.legend()
    ax.grid(alpha=0.3)
    if title is not None:
        ax.set_title(title)
    fig.autofmt_xdate()
    fig.tight_layout()
    return fig
