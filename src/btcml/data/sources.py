"""
CSV source loading for the Bitcoin feature table.

Every source is reduced to the same shape: a ``date`` column normalised to
day granularity plus renamed numeric value columns, sorted ascending.
Duplicate dates are kept as-is; the joiner rejects them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import pandas as pd

from btcml.errors import SchemaError
from btcml.utils import get_logger

logger = get_logger("data.sources")

DATE_COLUMN = "date"


# ══════════════════════════════════════════════════════════════════════════════
# SOURCE CONFIG
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class SourceConfig:
    """
    Declares how one CSV file maps onto the feature table.

    Attributes:
        name: Source identifier used by the join specification
        path: File path, relative to the data directory
        date_column: Raw name of the date column
        columns: Raw value column name -> output column name
        date_format: Optional strftime format passed to pandas.to_datetime
    """

    name: str
    path: str
    date_column: str
    columns: Dict[str, str] = field(default_factory=dict)
    date_format: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SourceConfig":
        missing = [key for key in ("name", "path", "date_column") if key not in payload]
        if missing:
            raise SchemaError(f"Source config is missing keys: {missing}")
        return cls(
            name=str(payload["name"]),
            path=str(payload["path"]),
            date_column=str(payload["date_column"]),
            columns=dict(payload.get("columns") or {}),
            date_format=payload.get("date_format"),
        )


# ══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════════════════════


def require_columns(df: pd.DataFrame, columns: Iterable[str], source: str) -> None:
    """Raise SchemaError if any of ``columns`` is absent from ``df``."""
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise SchemaError(f"Source '{source}' is missing columns: {missing}")


def normalize_dates(values: pd.Series, date_format: Optional[str] = None) -> pd.Series:
    """Parse to datetime, drop timezone, and floor to midnight."""
    parsed = pd.to_datetime(values, format=date_format)
    if parsed.dt.tz is not None:
        parsed = parsed.dt.tz_localize(None)
    return parsed.dt.normalize()


def tidy_source(
    df: pd.DataFrame,
    date_column: str,
    columns: Mapping[str, str],
    *,
    name: str = "source",
    date_format: Optional[str] = None,
) -> pd.DataFrame:
    """Reduce a raw frame to ``date`` + renamed numeric columns."""
    require_columns(df, [date_column, *columns.keys()], name)

    value_columns = dict(columns) or {
        col: col for col in df.columns if col != date_column
    }

    tidy = pd.DataFrame({DATE_COLUMN: normalize_dates(df[date_column], date_format)})
    for raw_name, out_name in value_columns.items():
        tidy[out_name] = pd.to_numeric(df[raw_name], errors="coerce")

    # Rows without a parseable date carry no position on the time axis
    tidy = tidy.dropna(subset=[DATE_COLUMN])
    return tidy.sort_values(DATE_COLUMN, kind="stable").reset_index(drop=True)


# ══════════════════════════════════════════════════════════════════════════════
# LOADING
# ══════════════════════════════════════════════════════════════════════════════


def read_source(
    path: str | Path,
    date_column: str,
    columns: Mapping[str, str] | None = None,
    *,
    name: Optional[str] = None,
    date_format: Optional[str] = None,
) -> pd.DataFrame:
    """
    Read one CSV source.

    Args:
        path: CSV file path
        date_column: Raw name of the date column
        columns: Raw value column -> output column. Empty keeps every
            non-date column under its raw name.
        name: Source name for error messages (defaults to the file stem)
        date_format: Optional explicit date format

    Returns:
        DataFrame with a ``date`` column and numeric value columns

    Raises:
        SchemaError: If the date column or a declared value column is missing
    """
    path = Path(path)
    source_name = name or path.stem
    raw = pd.read_csv(path)
    tidy = tidy_source(raw, date_column, columns or {}, name=source_name, date_format=date_format)
    logger.debug(f"Loaded {source_name}: {len(tidy)} rows from {path}")
    return tidy


def load_sources(
    source_configs: Iterable[SourceConfig | Mapping[str, Any]],
    data_dir: str | Path,
) -> dict[str, pd.DataFrame]:
    """Load every configured source, keyed by source name."""
    base = Path(data_dir)
    frames: dict[str, pd.DataFrame] = {}
    for entry in source_configs:
        cfg = entry if isinstance(entry, SourceConfig) else SourceConfig.from_dict(entry)
        frames[cfg.name] = read_source(
            base / cfg.path,
            cfg.date_column,
            cfg.columns,
            name=cfg.name,
            date_format=cfg.date_format,
        )
        logger.info(f"  {cfg.name}: {len(frames[cfg.name])} rows")
    return frames


__all__ = [
    "DATE_COLUMN",
    "SourceConfig",
    "load_sources",
    "normalize_dates",
    "read_source",
    "require_columns",
    "tidy_source",
]
