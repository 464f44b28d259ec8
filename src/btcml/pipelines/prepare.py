"""
Build the joined, normalised feature table from the configured sources.

load sources -> (indicators) -> join on the primary table -> drop rows
without a target -> sentinel substitution + per-column fill.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from btcml.data.fill import SentinelRule, normalize_missing
from btcml.data.indicators import (
    attach_regions,
    country_features,
    filter_indicators,
    read_indicator_workbook,
    read_region_mapping,
)
from btcml.data.join import YEAR_COLUMN, JoinSpec, add_year_key, join_sources
from btcml.data.sources import DATE_COLUMN, load_sources
from btcml.errors import ConfigurationError, SchemaError
from btcml.paths import get_data_dir
from btcml.pipelines.config import DEFAULT_CONFIG, Config, merge_config
from btcml.utils import get_logger

logger = get_logger("pipelines.prepare")


@dataclass
class FeatureTable:
    """
    The model-ready table and what was learned while building it.

    Attributes:
        frame: One row per date, sorted ascending, normalised
        target: Name of the target column
        unreliable_columns: Columns still holding nulls after filling
        source_rows: Row count of every loaded source
        indicators: Long indicator table (with regions when mapped), if loaded
        dropped_target_rows: Primary rows removed because the target was missing
    """

    frame: pd.DataFrame
    target: str
    unreliable_columns: List[str] = field(default_factory=list)
    source_rows: Dict[str, int] = field(default_factory=dict)
    indicators: Optional[pd.DataFrame] = None
    dropped_target_rows: int = 0

    @property
    def feature_columns(self) -> List[str]:
        """Numeric model inputs: everything except keys, the target and unusable columns."""
        excluded = {DATE_COLUMN, YEAR_COLUMN, self.target, *self.unreliable_columns}
        numeric = self.frame.select_dtypes("number").columns
        return [col for col in numeric if col not in excluded]

    @property
    def is_reliable(self) -> bool:
        return not self.unreliable_columns


def _indicator_spec(cfg: Dict[str, Any], data_dir: Path) -> tuple[Optional[pd.DataFrame], Optional[JoinSpec]]:
    path = cfg.get("path")
    if not path:
        return None, None

    long = read_indicator_workbook(
        data_dir / path,
        sheet_name=cfg.get("sheet_name", 0),
        skiprows=int(cfg.get("skiprows", 0)),
    )
    long = filter_indicators(long, threshold=float(cfg.get("missing_threshold", 0.2)))

    regions_path = cfg.get("regions_path")
    if regions_path:
        mapping = read_region_mapping(
            data_dir / regions_path,
            country_column=cfg.get("regions_country_column", "TableName"),
            region_column=cfg.get("regions_region_column", "Region"),
        )
        long = attach_regions(long, mapping)

    if not cfg.get("join", True):
        return long, None

    country = cfg.get("country", "World")
    features = country_features(long, country)
    logger.info(f"  indicators: {features.shape[1] - 1} yearly features for {country}")
    return long, JoinSpec("indicators", features, key=YEAR_COLUMN, how="left")


def build_feature_table(config: Config | None = None, data_dir: str | Path | None = None) -> FeatureTable:
    """
    Load, join and normalise every configured source.

    Args:
        config: Full or partial config (merged onto DEFAULT_CONFIG)
        data_dir: Overrides config["data"]["data_dir"] and BTCML_DATA_DIR

    Raises:
        ConfigurationError: Unknown primary/join source names
        SchemaError / JoinIntegrityError: From loading and joining
    """
    config = merge_config(DEFAULT_CONFIG, config)
    data_cfg = config["data"]
    base_dir = get_data_dir(data_dir or data_cfg.get("data_dir"))
    target = config["target"]
    logger.info(f"Loading sources from {base_dir}")

    frames = load_sources(data_cfg["sources"], base_dir)

    primary_name = data_cfg["primary"]
    if primary_name not in frames:
        raise ConfigurationError(f"Primary source '{primary_name}' is not among the configured sources")
    primary = frames[primary_name]
    if target not in primary.columns:
        raise SchemaError(f"Target column '{target}' is not provided by primary source '{primary_name}'")

    specs: List[JoinSpec] = []
    for entry in data_cfg.get("joins", []):
        name = entry["source"]
        if name not in frames:
            raise ConfigurationError(f"Join refers to unknown source '{name}'")
        specs.append(JoinSpec(name, frames[name], key=entry.get("key", DATE_COLUMN), how=entry.get("how", "left")))

    indicators, indicator_spec = _indicator_spec(config.get("indicators") or {}, base_dir)
    policies = dict(config["fill"].get("policies") or {})
    if indicator_spec is not None:
        primary = add_year_key(primary)
        specs.append(indicator_spec)
        indicator_policy = config["fill"].get("indicator_policy", "downup")
        for column in indicator_spec.source.columns:
            if column != YEAR_COLUMN:
                policies.setdefault(column, indicator_policy)

    joined = join_sources(primary, specs)
    logger.info(f"Joined table: {len(joined)} rows x {joined.shape[1]} columns")

    # The target is never filled: rows without an observed price are dropped before normalisation
    missing_target = joined[target].isna()
    dropped = int(missing_target.sum())
    if dropped:
        logger.warning(f"Dropping {dropped} rows without a '{target}' value")
        joined = joined.loc[~missing_target].reset_index(drop=True)

    sentinels = [SentinelRule(s["column"], s.get("value", 0)) for s in config["fill"].get("sentinels", [])]
    report = normalize_missing(joined, policies, sentinels)

    return FeatureTable(
        frame=report.frame,
        target=target,
        unreliable_columns=report.unreliable_columns,
        source_rows={name: len(frame) for name, frame in frames.items()},
        indicators=indicators,
        dropped_target_rows=dropped,
    )


__all__ = ["FeatureTable", "build_feature_table"]
