from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from btcml.paths import PROJECT_ROOT

Config = Dict[str, Any]

# Default configuration; can be overridden by callers.
# File names follow the public exports the analysis was built on; point
# "data_dir" (or BTCML_DATA_DIR) at the folder that holds them.
DEFAULT_CONFIG: Config = {
    "data": {
        "data_dir": None,
        "sources": [
            {"name": "market_price", "path": "market-price.csv", "date_column": "Timestamp",
             "columns": {"market-price": "market_price"}},
            {"name": "trade_volume", "path": "trade-volume.csv", "date_column": "Timestamp",
             "columns": {"trade-volume": "trade_volume"}},
            {"name": "hash_rate", "path": "hash-rate.csv", "date_column": "Timestamp",
             "columns": {"hash-rate": "hash_rate"}},
            {"name": "n_transactions", "path": "n-transactions.csv", "date_column": "Timestamp",
             "columns": {"n-transactions": "n_transactions"}},
            {"name": "currency", "path": "currency_exchange_rates.csv", "date_column": "Date",
             "columns": {"Euro": "eur_usd", "Japanese Yen": "jpy_usd", "U.K. Pound Sterling": "gbp_usd",
                         "Chinese Yuan": "cny_usd"}},
            {"name": "gold", "path": "gold_price.csv", "date_column": "Date",
             "columns": {"USD (AM)": "gold_usd"}},
            {"name": "sp500", "path": "sp_composite.csv", "date_column": "Date",
             "columns": {"S&P Composite": "sp_composite", "Dividend": "sp_dividend",
                         "Earnings": "sp_earnings", "CPI": "cpi", "Long Interest Rate": "long_rate"}},
        ],
        "primary": "market_price",
        "joins": [
            {"source": "trade_volume", "key": "date", "how": "left"},
            {"source": "hash_rate", "key": "date", "how": "left"},
            {"source": "n_transactions", "key": "date", "how": "left"},
            {"source": "currency", "key": "date", "how": "left"},
            {"source": "gold", "key": "date", "how": "left"},
            {"source": "sp500", "key": "date", "how": "left"},
        ],
    },
    "indicators": {
        "path": None,
        "sheet_name": 0,
        "skiprows": 0,
        "regions_path": None,
        "regions_country_column": "TableName",
        "regions_region_column": "Region",
        "missing_threshold": 0.2,
        "country": "World",
        "join": True,
    },
    "fill": {
        # Per-column policies; every feature column should be declared here
        "policies": {
            "trade_volume": "updown",
            "hash_rate": "updown",
            "n_transactions": "updown",
            "eur_usd": "downup",
            "jpy_usd": "downup",
            "gbp_usd": "downup",
            "cny_usd": "downup",
            "gold_usd": "downup",
            "sp_composite": "downup",
            "sp_dividend": "downup",
            "sp_earnings": "downup",
            "cpi": "downup",
            "long_rate": "downup",
        },
        # Policy for indicator columns added from the indicator workbook
        "indicator_policy": "downup",
        "sentinels": [{"column": "trade_volume", "value": 0}],
    },
    "target": "market_price",
    "split": {"train": 0.8},
    "rolling_origin": {
        "initial_window": 800,
        "horizon": 200,
        "skip": 300,
        "fixed_window": True,
        "gap": 0,
    },
    "metric": {"primary": "rmse", "metrics": ["rmse", "r2", "mae"]},
    "models": [
        {"name": "GradientBoosting", "grid": None},
        {"name": "QuantileForest", "grid": None},
        {"name": "ARIMA", "grid": {"d": 1, "max_p": 5, "max_q": 5}},
    ],
    "paths": {
        "report": str((PROJECT_ROOT / "reports" / "bitcoin_report.html").resolve()),
        "persist_best": False,
        "model_key": "bitcoin_price",
    },
}


def merge_config(base: Config, override: Config | None = None) -> Config:
    """Shallow-merge override into base (one level deep)."""
    if not override:
        return dict(base)
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            merged = dict(result[key])
            merged.update(value)
            result[key] = merged
        else:
            result[key] = value
    return result


def load_config(path: str | Path | None = None, base: Config | None = None) -> Config:
    """Read a JSON override file and merge it onto ``base`` (DEFAULT_CONFIG by default)."""
    base = DEFAULT_CONFIG if base is None else base
    if path is None:
        return merge_config(base)
    override = json.loads(Path(path).read_text())
    if not isinstance(override, dict):
        raise ValueError(f"Config file {path} must contain a JSON object.")
    return merge_config(base, override)


__all__ = ["DEFAULT_CONFIG", "Config", "load_config", "merge_config"]
