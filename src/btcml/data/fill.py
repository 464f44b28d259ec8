"""
Missing-value normalisation.

Every column's missing-data semantics are declared explicitly through a
per-column ``FillPolicy`` map; columns without a policy are not filled.
Literal values that a source uses to encode "missing" (zero trade volume)
are declared as ``SentinelRule`` entries and become null before filling.
Any column that still holds nulls afterwards is reported as unreliable.

Example:
    >>> report = normalize_missing(
    ...     table,
    ...     policies={"trade_volume": "updown", "gold_usd": FillPolicy.DOWN_UP},
    ...     sentinels=[SentinelRule("trade_volume", 0)],
    ... )
    >>> report.frame, report.unreliable_columns
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Union

import pandas as pd

from btcml.errors import DataQualityWarning, SchemaError
from btcml.utils import get_logger

logger = get_logger("data.fill")


class FillPolicy(str, Enum):
    """Direction(s) in which available values propagate into nulls."""

    UP = "up"            # next value copied backward
    DOWN = "down"        # previous value copied forward
    UP_DOWN = "updown"
    DOWN_UP = "downup"


PolicyLike = Union[FillPolicy, str]


@dataclass(frozen=True)
class SentinelRule:
    """A literal value that means "missing" for one column."""

    column: str
    value: Any = 0


@dataclass
class FillReport:
    """Normalised frame plus the columns that still hold nulls."""

    frame: pd.DataFrame
    unreliable_columns: List[str] = field(default_factory=list)
    sentinel_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def is_reliable(self) -> bool:
        return not self.unreliable_columns


def fill_column(series: pd.Series, policy: PolicyLike) -> pd.Series:
    """Apply one directional fill to a single column."""
    policy = FillPolicy(policy)
    if policy is FillPolicy.UP:
        return series.bfill()
    if policy is FillPolicy.DOWN:
        return series.ffill()
    if policy is FillPolicy.UP_DOWN:
        return series.bfill().ffill()
    return series.ffill().bfill()


def replace_sentinels(frame: pd.DataFrame, sentinels: Iterable[SentinelRule]) -> tuple[pd.DataFrame, Dict[str, int]]:
    """Return a copy with every sentinel value turned into NaN, plus per-column counts."""
    result = frame.copy()
    counts: Dict[str, int] = {}
    for rule in sentinels:
        if rule.column not in result.columns:
            raise SchemaError(f"Sentinel rule refers to unknown column '{rule.column}'")
        mask = result[rule.column] == rule.value
        counts[rule.column] = counts.get(rule.column, 0) + int(mask.sum())
        result[rule.column] = result[rule.column].mask(mask)
    return result, counts


def normalize_missing(
    frame: pd.DataFrame,
    policies: Mapping[str, PolicyLike],
    sentinels: Iterable[SentinelRule] = (),
) -> FillReport:
    """
    Replace sentinels, then fill each column by its declared policy.

    The input frame is not modified. Row count and date keys never change.
    A column that still holds any null afterwards triggers a
    DataQualityWarning and is listed in ``FillReport.unreliable_columns``.
    That includes columns without a policy and one-directional fills that
    leave an edge gap.

    Raises:
        SchemaError: If a policy or sentinel names a column that does not exist
        ValueError: If a policy string is not a known FillPolicy
    """
    unknown = [col for col in policies if col not in frame.columns]
    if unknown:
        raise SchemaError(f"Fill policies refer to unknown columns: {unknown}")
    resolved = {col: FillPolicy(policy) for col, policy in policies.items()}

    result, sentinel_counts = replace_sentinels(frame, sentinels)
    for column, count in sentinel_counts.items():
        if count:
            logger.debug(f"{column}: {count} sentinel value(s) treated as missing")

    for column, policy in resolved.items():
        result[column] = fill_column(result[column], policy)

    unreliable = [col for col in result.columns if result[col].isna().any()]
    for column in unreliable:
        missing = int(result[column].isna().sum())
        if missing == len(result):
            message = f"Column '{column}' has no observed values; it is still entirely null after filling"
        elif column not in resolved:
            message = f"Column '{column}' has {missing} null value(s) and no fill policy"
        else:
            message = f"Column '{column}' still has {missing} null value(s) after '{resolved[column].value}' fill"
        logger.warning(message)
        warnings.warn(message, DataQualityWarning, stacklevel=2)

    return FillReport(frame=result, unreliable_columns=unreliable, sentinel_counts=sentinel_counts)


__all__ = [
    "FillPolicy",
    "FillReport",
    "PolicyLike",
    "SentinelRule",
    "fill_column",
    "normalize_missing",
    "replace_sentinels",
]
