"""
Rolling-origin (walk-forward) fold generation.

Each fold pairs a training window with the validation window that follows
it. Windows are half-open row ranges over a date-sorted table, so every
validation row is strictly later than every training row of its fold.

Fixed window (default):

    fold 0:  [train 0 ........ 800)[val 800 .. 1000)
    fold 1:        [train 300 ........ 1100)[val 1100 .. 1300)

Growing window (``fixed_window=False``): the training start stays at 0 and
its end advances by ``skip`` per fold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

import pandas as pd

from btcml.errors import ConfigurationError


@dataclass(frozen=True)
class Window:
    """Half-open row range ``[start, stop)``."""

    start: int
    stop: int

    def __len__(self) -> int:
        return self.stop - self.start

    def as_slice(self) -> slice:
        return slice(self.start, self.stop)


@dataclass(frozen=True)
class Fold:
    """One (training window, validation window) pair."""

    index: int
    train: Window
    validation: Window

    def slice(self, frame: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
        """Return the (train, validation) rows of ``frame``."""
        if self.validation.stop > len(frame):
            raise ConfigurationError(
                f"Fold {self.index} needs {self.validation.stop} rows, table has {len(frame)}"
            )
        return frame.iloc[self.train.as_slice()], frame.iloc[self.validation.as_slice()]


@dataclass(frozen=True)
class RollingOrigin:
    """
    Deterministic, finite sequence of folds over a table of ``n_rows`` rows.

    Attributes:
        n_rows: Length of the date-sorted table
        initial_window: Training rows in the first fold
        horizon: Validation rows per fold
        skip: Rows the fold origin advances between consecutive folds
        fixed_window: Slide the training start (True) or keep it at 0 (False)
        gap: Rows left out between a training window and its validation window

    Example:
        >>> folds = RollingOrigin(1300, initial_window=800, horizon=200, skip=300)
        >>> len(folds)
        2
        >>> [f.train.start for f in folds]
        [0, 300]
    """

    n_rows: int
    initial_window: int = 800
    horizon: int = 200
    skip: int = 300
    fixed_window: bool = True
    gap: int = 0

    def __post_init__(self) -> None:
        for name in ("initial_window", "horizon", "skip"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
        if self.gap < 0:
            raise ConfigurationError(f"gap must be non-negative, got {self.gap}")
        if self.n_rows < self.initial_window + self.gap + self.horizon:
            raise ConfigurationError(
                f"Table of {self.n_rows} rows is too short for one fold "
                f"(initial_window={self.initial_window} + gap={self.gap} + horizon={self.horizon})"
            )

    def __len__(self) -> int:
        span = self.initial_window + self.gap + self.horizon
        return (self.n_rows - span) // self.skip + 1

    def __iter__(self) -> Iterator[Fold]:
        index = 0
        while True:
            offset = index * self.skip
            train_start = offset if self.fixed_window else 0
            train_stop = offset + self.initial_window
            val_start = train_stop + self.gap
            val_stop = val_start + self.horizon
            if val_stop > self.n_rows:
                return
            yield Fold(
                index=index,
                train=Window(train_start, train_stop),
                validation=Window(val_start, val_stop),
            )
            index += 1


def rolling_origin_folds(
    n_rows: int,
    initial_window: int = 800,
    horizon: int = 200,
    skip: int = 300,
    fixed_window: bool = True,
    gap: int = 0,
) -> List[Fold]:
    """Materialise the fold sequence as a list."""
    return list(
        RollingOrigin(
            n_rows=n_rows,
            initial_window=initial_window,
            horizon=horizon,
            skip=skip,
            fixed_window=fixed_window,
            gap=gap,
        )
    )


__all__ = ["Fold", "RollingOrigin", "Window", "rolling_origin_folds"]
