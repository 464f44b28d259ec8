"""Chronological train/test split."""

from __future__ import annotations

import math
from dataclasses import dataclass

import pandas as pd

from btcml.data.sources import DATE_COLUMN
from btcml.errors import ConfigurationError, SchemaError


@dataclass
class Split:
    """
    Train rows ``[0, cut)`` and test rows ``[cut, n)`` of a sorted table.

    Attributes:
        train: Rows before the partition point
        test: Rows at/after the partition point
        cut: Row index of the partition point
    """

    train: pd.DataFrame
    test: pd.DataFrame
    cut: int

    def __len__(self) -> int:
        return len(self.train) + len(self.test)


def split_point(n_rows: int, fraction: float) -> int:
    """
    Return ``floor(fraction * n_rows)`` after validating the partition.

    Raises:
        ConfigurationError: If fraction is not strictly inside (0, 1) or the
            resulting train or test part would be empty
    """
    if not 0 < fraction < 1:
        raise ConfigurationError(f"split fraction must be in (0, 1), got {fraction}")
    cut = math.floor(fraction * n_rows)
    if cut == 0 or cut == n_rows:
        raise ConfigurationError(
            f"split fraction {fraction} on {n_rows} rows leaves an empty "
            f"{'train' if cut == 0 else 'test'} set"
        )
    return cut


def chronological_split(
    frame: pd.DataFrame,
    fraction: float = 0.8,
    date_column: str = DATE_COLUMN,
) -> Split:
    """
    Split a date-sorted table without shuffling.

    Example:
        >>> split = chronological_split(table, fraction=0.8)
        >>> len(split.train), len(split.test)
        (8, 2)   # for a 10-row table
    """
    if date_column not in frame.columns:
        raise SchemaError(f"Table has no '{date_column}' column to split on")
    if not frame[date_column].is_monotonic_increasing:
        raise ConfigurationError(f"Table must be sorted ascending by '{date_column}' before splitting")

    cut = split_point(len(frame), fraction)
    return Split(train=frame.iloc[:cut], test=frame.iloc[cut:], cut=cut)


__all__ = ["Split", "chronological_split", "split_point"]
