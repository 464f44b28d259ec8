#!/usr/bin/env python3
"""
Run the Bitcoin price analysis end to end and write the HTML report.

Usage:
    python scripts/run_analysis.py --data-dir data/
    python scripts/run_analysis.py --config configs/quick.json --models GradientBoosting ARIMA
    python scripts/run_analysis.py --output reports/latest.html --persist
"""

from __future__ import annotations

import argparse
import logging
import sys
import warnings
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from btcml.errors import BtcmlError, DataQualityWarning  # noqa: E402
from btcml.modeling import list_models  # noqa: E402
from btcml.pipelines.config import load_config  # noqa: E402
from btcml.pipelines.report import render_report  # noqa: E402
from btcml.pipelines.train import run_analysis  # noqa: E402
from btcml.utils import get_logger, setup_logging, silence_libraries  # noqa: E402

logger = get_logger("scripts.run_analysis")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bitcoin market price analysis")
    parser.add_argument("--config", type=str, help="JSON file merged onto the default config")
    parser.add_argument("--data-dir", type=str, help="Folder holding the source files (default: BTCML_DATA_DIR or data/)")
    parser.add_argument("--output", type=str, help="HTML report path (default: config paths.report)")
    parser.add_argument("--models", nargs="+", help="Only run these models (e.g. GradientBoosting ARIMA)")
    parser.add_argument("--persist", action="store_true", help="Persist the best model with joblib")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=str, help="Also write the log to this file")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)
    silence_libraries()
    # Already logged by the fill step
    warnings.filterwarnings("ignore", category=DataQualityWarning)

    config = load_config(args.config)
    if args.models:
        unknown = [name for name in args.models if name not in list_models()]
        if unknown:
            logger.error(f"Unknown model(s) {unknown}; available: {list_models()}")
            return 1
        known = {spec["name"]: spec for spec in config["models"]}
        config["models"] = [known.get(name, {"name": name, "grid": None}) for name in args.models]
    if args.persist:
        config["paths"] = {**config["paths"], "persist_best": True}

    try:
        result = run_analysis(config, data_dir=args.data_dir)
    except BtcmlError as exc:
        logger.error(f"Analysis failed: {exc}")
        return 1

    output = render_report(result, args.output or config["paths"]["report"])
    print(result.comparison().to_string(index=False))
    print(f"\nReport: {output}")
    if result.artifact_path:
        print(f"Model:  {result.artifact_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
