"""
Dataset joiner.

The feature table's date axis is the primary table's date axis. Every other
source is attached by exact key match, in the order given by an explicit
list of ``JoinSpec`` entries. All specs are validated before the first merge
so an ambiguous key fails the whole join instead of producing partial output.

Example:
    >>> specs = [
    ...     JoinSpec("trade_volume", trade_volume_df),
    ...     JoinSpec("gold", gold_df, how="left"),
    ...     JoinSpec("indicators", wdi_df, key="year"),
    ... ]
    >>> table = join_sources(add_year_key(market_price_df), specs)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

import pandas as pd

from btcml.errors import ConfigurationError, JoinIntegrityError, SchemaError
from btcml.utils import get_logger

from .sources import DATE_COLUMN

logger = get_logger("data.join")

JoinKind = Literal["left", "inner"]
JOIN_KINDS: tuple[str, ...] = ("left", "inner")
YEAR_COLUMN = "year"


@dataclass
class JoinSpec:
    """One secondary source and how it attaches to the primary table."""

    name: str
    source: pd.DataFrame
    key: str = DATE_COLUMN
    how: JoinKind = "left"


def add_year_key(frame: pd.DataFrame, date_column: str = DATE_COLUMN) -> pd.DataFrame:
    """Return a copy with an integer ``year`` column derived from the date."""
    if date_column not in frame.columns:
        raise SchemaError(f"Cannot derive '{YEAR_COLUMN}': column '{date_column}' is missing")
    result = frame.copy()
    result[YEAR_COLUMN] = result[date_column].dt.year.astype(int)
    return result


def _duplicate_keys(frame: pd.DataFrame, key: str) -> list:
    dupes = frame.loc[frame[key].duplicated(keep=False), key]
    return sorted(dupes.unique().tolist())


def validate_join(
    primary: pd.DataFrame,
    specs: Sequence[JoinSpec],
    date_column: str = DATE_COLUMN,
) -> None:
    """
    Check every precondition of the join without merging anything.

    Raises:
        SchemaError: Missing key column, or a value column contributed twice
        JoinIntegrityError: Duplicate keys in the primary or a source
        ConfigurationError: Unknown join kind
    """
    if date_column not in primary.columns:
        raise SchemaError(f"Primary table is missing key column '{date_column}'")

    dupes = _duplicate_keys(primary, date_column)
    if dupes:
        raise JoinIntegrityError(
            f"Primary table has {len(dupes)} duplicate '{date_column}' value(s), e.g. {dupes[:3]}"
        )

    seen_columns = set(primary.columns)
    for spec in specs:
        if spec.how not in JOIN_KINDS:
            raise ConfigurationError(
                f"Join '{spec.name}': unknown kind '{spec.how}', expected one of {JOIN_KINDS}"
            )
        if spec.key not in primary.columns:
            raise SchemaError(f"Join '{spec.name}': primary table has no key column '{spec.key}'")
        if spec.key not in spec.source.columns:
            raise SchemaError(f"Join '{spec.name}': source has no key column '{spec.key}'")

        dupes = _duplicate_keys(spec.source, spec.key)
        if dupes:
            raise JoinIntegrityError(
                f"Join '{spec.name}': {len(dupes)} duplicate '{spec.key}' value(s), e.g. {dupes[:3]}"
            )

        value_columns = [col for col in spec.source.columns if col not in (spec.key, date_column)]
        clashes = sorted(seen_columns.intersection(value_columns))
        if clashes:
            raise SchemaError(f"Join '{spec.name}': columns already present in the table: {clashes}")
        seen_columns.update(value_columns)


def join_sources(
    primary: pd.DataFrame,
    specs: Sequence[JoinSpec],
    date_column: str = DATE_COLUMN,
) -> pd.DataFrame:
    """
    Join every source onto the primary table.

    Args:
        primary: Table whose date axis becomes the output axis
        specs: Sources in join order
        date_column: Name of the primary's date key

    Returns:
        One row per primary date (fewer for inner joins), sorted ascending
    """
    validate_join(primary, specs, date_column)

    joined = primary.copy()
    for spec in specs:
        # Secondary date keys never become extra rows; only the primary's axis survives
        source = spec.source
        if spec.key != date_column and date_column in source.columns:
            source = source.drop(columns=[date_column])
        before = len(joined)
        joined = joined.merge(source, on=spec.key, how=spec.how, validate="many_to_one")
        logger.debug(f"Joined {spec.name} ({spec.how} on {spec.key}): {before} -> {len(joined)} rows")

    return joined.sort_values(date_column, kind="stable").reset_index(drop=True)


__all__ = [
    "JOIN_KINDS",
    "JoinKind",
    "JoinSpec",
    "YEAR_COLUMN",
    "add_year_key",
    "join_sources",
    "validate_join",
]
