"""
Data preparation for the Bitcoin feature table.

- sources: CSV loading with date normalisation
- indicators: World Bank indicator reshape, filtering and regions
- join: explicit join specification onto the primary table
- fill: per-column missing-value policies and sentinel rules
"""

from .fill import FillPolicy, FillReport, SentinelRule, fill_column, normalize_missing, replace_sentinels
from .indicators import (
    attach_regions,
    country_features,
    filter_indicators,
    melt_indicators,
    read_indicator_workbook,
    read_region_mapping,
    region_summary,
)
from .join import JoinSpec, add_year_key, join_sources, validate_join
from .sources import DATE_COLUMN, SourceConfig, load_sources, read_source

__all__ = [
    # Sources
    "DATE_COLUMN",
    "SourceConfig",
    "load_sources",
    "read_source",
    # Indicators
    "attach_regions",
    "country_features",
    "filter_indicators",
    "melt_indicators",
    "read_indicator_workbook",
    "read_region_mapping",
    "region_summary",
    # Join
    "JoinSpec",
    "add_year_key",
    "join_sources",
    "validate_join",
    # Fill
    "FillPolicy",
    "FillReport",
    "SentinelRule",
    "fill_column",
    "normalize_missing",
    "replace_sentinels",
]
