from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from itertools import product
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from btcml.evaluation.backtest import BacktestResult, rolling_origin_backtest
from btcml.evaluation.rolling_origin import RollingOrigin
from btcml.evaluation.split import Split, chronological_split
from btcml.metrics.registry import compute_metrics
from btcml.modeling.artifacts import persist_model
from btcml.modeling.base import BaseModel
from btcml.modeling.quantile_forest import QuantileForestModel
from btcml.modeling.registry import get_default_grid, get_model
from btcml.pipelines.config import DEFAULT_CONFIG, Config, merge_config
from btcml.pipelines.prepare import FeatureTable, build_feature_table
from btcml.utils import get_logger

logger = get_logger("pipelines.train")

GREATER_IS_BETTER = {"r2"}
INTERVAL_QUANTILES = (0.05, 0.95)


@dataclass
class ModelResult:
    """Best configuration of one model and how it did on the test set."""

    model_name: str
    params: Dict[str, Any]
    cv: BacktestResult
    test_metrics: Dict[str, Optional[float]]
    predictions: np.ndarray
    model_obj: BaseModel
    reliable: bool = True
    intervals: Optional[pd.DataFrame] = None

    def summary(self, primary_metric: str) -> Dict[str, Any]:
        """Flat, JSON-friendly row for tables and artifact metadata."""
        cv_means = self.cv.mean_metrics
        return {
            "model": self.model_name,
            "params": self.params,
            f"cv_{primary_metric}": cv_means.get(primary_metric),
            "folds": self.cv.n_folds,
            **{f"test_{name}": value for name, value in self.test_metrics.items()},
            "reliable": self.reliable,
        }


@dataclass
class AnalysisResult:
    """Everything the report needs."""

    table: FeatureTable
    split: Split
    features: List[str]
    results: List[ModelResult] = field(default_factory=list)
    primary_metric: str = "rmse"
    best_model: Optional[str] = None
    artifact_path: Optional[Path] = None

    def comparison(self) -> pd.DataFrame:
        """One row per model, best first."""
        ranked = sorted(self.results, key=lambda r: _score(r.cv.mean_metrics, self.primary_metric))
        return pd.DataFrame([r.summary(self.primary_metric) for r in ranked])


def _iter_param_grid(grid: Dict[str, Any]) -> Iterable[Dict[str, Any]]:
    if not grid:
        yield {}
        return
    keys = list(grid.keys())
    values = [v if isinstance(v, list) else [v] for v in grid.values()]
    for combo in product(*values):
        yield {key: value for key, value in zip(keys, combo)}


def _score(metrics: Dict[str, Optional[float]], primary_metric: str) -> float:
    """Lower is better; undefined scores lose to every defined one."""
    value = metrics.get(primary_metric)
    if value is None:
        return float("inf")
    return -value if primary_metric in GREATER_IS_BETTER else value


def select_and_evaluate(
    model_name: str,
    grid: Dict[str, Any],
    split: Split,
    features: List[str],
    target: str,
    rolling_cfg: Dict[str, Any],
    metric_names: List[str],
    primary_metric: str,
) -> tuple[BaseModel, Dict[str, Any], BacktestResult, Dict[str, Optional[float]], np.ndarray]:
    """
    Grid-search one model over rolling-origin folds of the training part,
    refit the winner on the whole training part and score it on the test part.
    """
    model_cls = get_model(model_name)
    train_X, train_y = split.train[features], split.train[target]
    test_X, test_y = split.test[features], split.test[target]
    folds = RollingOrigin(n_rows=len(split.train), **rolling_cfg)

    candidates = list(_iter_param_grid(grid))
    logger.info(f"    Grid search: {len(candidates)} parameter combination(s) x {len(folds)} fold(s)")

    best_cv: Optional[BacktestResult] = None
    best_params: Dict[str, Any] = {}
    best_score = float("inf")
    for idx, params in enumerate(candidates, 1):
        if len(candidates) > 1:
            logger.debug(f"    [{idx}/{len(candidates)}] Testing params: {params}")
        cv = rolling_origin_backtest(model_cls, params, train_X, train_y, folds, metric_names)
        score = _score(cv.mean_metrics, primary_metric)
        if best_cv is None or score < best_score:
            best_cv, best_params, best_score = cv, params, score

    logger.info(f"    Best {model_name}: cv {primary_metric}={best_cv.mean_metrics.get(primary_metric)}, params={best_params}")

    model = model_cls(**best_params)
    model.fit(train_X, train_y)
    predictions = model.predict(test_X)
    test_metrics = compute_metrics(metric_names, test_y.to_numpy(), predictions, strict=False)
    return model, best_params, best_cv, test_metrics, predictions


def run_analysis(
    override_config: Config | None = None,
    data_dir: str | Path | None = None,
    table: FeatureTable | None = None,
) -> AnalysisResult:
    """
    Prepare the feature table, then select and evaluate every configured model.

    Args:
        override_config: Partial config merged onto DEFAULT_CONFIG
        data_dir: Data directory override passed to build_feature_table
        table: Pre-built feature table (skips loading)

    Returns:
        AnalysisResult with one ModelResult per configured model
    """
    config = merge_config(DEFAULT_CONFIG, override_config)
    metric_cfg = config.get("metric", {})
    primary_metric = metric_cfg.get("primary", "rmse")
    metric_names: List[str] = list(metric_cfg.get("metrics", [primary_metric]))
    if primary_metric not in metric_names:
        metric_names.insert(0, primary_metric)

    if table is None:
        table = build_feature_table(config, data_dir=data_dir)
    target = table.target
    features = table.feature_columns
    if table.unreliable_columns:
        logger.warning(f"Excluding columns with unfilled nulls from the features: {table.unreliable_columns}")

    split = chronological_split(table.frame, fraction=float(config["split"]["train"]))
    logger.info(f"Split: train={len(split.train)}, test={len(split.test)}, features={len(features)}")

    result = AnalysisResult(table=table, split=split, features=features, primary_metric=primary_metric)

    for model_spec in config["models"]:
        model_name = model_spec["name"]
        logger.info(f"  Training {model_name}...")
        grid = model_spec.get("grid") or get_default_grid(model_name)

        model, params, cv, test_metrics, predictions = select_and_evaluate(
            model_name, grid, split, features, target, dict(config["rolling_origin"]), metric_names, primary_metric
        )

        intervals = None
        if isinstance(model, QuantileForestModel):
            intervals = model.predict_quantiles(split.test[features], quantiles=INTERVAL_QUANTILES)

        # Univariate models never read the feature columns
        reliable = table.is_reliable or not model.uses_features
        if not reliable:
            logger.warning(f"    {model_name} result flagged unreliable: features had unfilled nulls")

        result.results.append(
            ModelResult(
                model_name=model.name,
                params=params,
                cv=cv,
                test_metrics=test_metrics,
                predictions=predictions,
                model_obj=model,
                reliable=reliable,
                intervals=intervals,
            )
        )
        logger.info(f"    Test metrics: {test_metrics}")

    if result.results:
        best = min(result.results, key=lambda r: _score(r.cv.mean_metrics, primary_metric))
        result.best_model = best.model_name
        logger.info(f"Best overall model: {best.model_name} (cv {primary_metric}={best.cv.mean_metrics.get(primary_metric)})")

        if config["paths"].get("persist_best"):
            result.artifact_path = persist_model(
                best.model_obj,
                model_key=config["paths"].get("model_key", "bitcoin_price"),
                run_date=datetime.now(UTC),
                metadata={**best.summary(primary_metric), "features": features, "target": target},
            )
            logger.info(f"Persisted {best.model_name} to {result.artifact_path}")

    return result


__all__ = ["AnalysisResult", "ModelResult", "run_analysis", "select_and_evaluate"]
