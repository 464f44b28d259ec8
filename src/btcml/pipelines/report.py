"""
Static HTML report.

Tables are rendered with ``DataFrame.to_html`` and figures are embedded as
base64 PNGs, so the output is a single self-contained file.
"""

from __future__ import annotations

import base64
import html
import io
from datetime import UTC, datetime
from pathlib import Path
from typing import List

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.figure import Figure

from btcml.data.indicators import region_summary
from btcml.data.sources import DATE_COLUMN
from btcml.evaluation.describe import correlation_matrix, describe_table, perform_adf_test, target_correlations
from btcml.evaluation.plot import plot_correlation_heatmap, plot_forecast_vs_actual, plot_price_history
from btcml.pipelines.train import AnalysisResult
from btcml.utils import get_logger

logger = get_logger("pipelines.report")

_STYLE = """
body { font-family: sans-serif; margin: 2em auto; max-width: 1100px; color: #222; }
table { border-collapse: collapse; font-size: 0.85em; margin-bottom: 1.5em; }
th, td { border: 1px solid #ccc; padding: 3px 8px; text-align: right; }
th { background: #f2f2f2; }
.warning { background: #fff3cd; border: 1px solid #e0c36b; padding: 0.6em 1em; }
img { max-width: 100%; }
"""


def figure_to_html(fig: Figure, alt: str = "") -> str:
    """Encode a figure as an inline PNG and close it."""
    buffer = io.BytesIO()
    fig.savefig(buffer, format="png", dpi=100, bbox_inches="tight")
    plt.close(fig)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f'<img alt="{html.escape(alt)}" src="data:image/png;base64,{encoded}"/>'


def _table(df: pd.DataFrame, float_format: str = "{:,.4f}") -> str:
    if df is None or df.empty:
        return "<p><em>No data.</em></p>"
    return df.to_html(float_format=float_format.format, na_rep="", border=0)


def _adf_rows(series: pd.Series) -> pd.DataFrame:
    rows = []
    for label, values in (("level", series), ("first difference", series.diff())):
        outcome = perform_adf_test(values)
        if "error" in outcome:
            rows.append({"series": label, "adf_statistic": None, "p_value": None, "stationary": outcome["error"]})
        else:
            rows.append({
                "series": label,
                "adf_statistic": outcome["adf_statistic"],
                "p_value": outcome["p_value"],
                "stationary": "yes" if outcome["is_stationary"] else "no",
            })
    return pd.DataFrame(rows).set_index("series")


def build_sections(result: AnalysisResult) -> List[str]:
    """Render every report section as an HTML fragment."""
    table = result.table
    frame = table.frame
    target = table.target
    sections: List[str] = []

    sections.append("<h2>Data</h2>")
    sources = pd.DataFrame({"rows": pd.Series(table.source_rows)})
    sections.append(_table(sources, "{:,.0f}"))
    sections.append(
        f"<p>Feature table: {len(frame):,} rows from {frame[DATE_COLUMN].min():%Y-%m-%d} "
        f"to {frame[DATE_COLUMN].max():%Y-%m-%d}; {len(result.features)} features. "
        f"{table.dropped_target_rows} rows without a {html.escape(target)} value were dropped.</p>"
    )
    if table.unreliable_columns:
        columns = ", ".join(html.escape(c) for c in table.unreliable_columns)
        sections.append(
            f'<p class="warning">Columns still holding nulls after filling (excluded from the '
            f"features, results of feature-based models flagged unreliable): {columns}</p>"
        )

    sections.append("<h2>Descriptive statistics</h2>")
    sections.append(_table(describe_table(frame)))
    sections.append(figure_to_html(plot_price_history(frame, target, title=f"{target} (log scale)", log_scale=True), target))

    sections.append("<h2>Correlations</h2>")
    numeric = [target, *result.features]
    corr = correlation_matrix(frame, columns=numeric)
    sections.append(figure_to_html(plot_correlation_heatmap(corr, title="Pearson correlation"), "correlation matrix"))
    sections.append(_table(target_correlations(frame[numeric], target).to_frame(f"corr with {target}")))

    sections.append("<h2>Stationarity (ADF)</h2>")
    sections.append(_table(_adf_rows(frame[target])))

    if table.indicators is not None and "region" in table.indicators.columns:
        sections.append("<h2>Development indicators by region</h2>")
        sections.append(_table(region_summary(table.indicators)))

    sections.append("<h2>Model comparison</h2>")
    sections.append(
        f"<p>Train {len(result.split.train):,} rows, test {len(result.split.test):,} rows. "
        f"Primary metric: {html.escape(result.primary_metric)}. Best model: {html.escape(str(result.best_model))}.</p>"
    )
    comparison = result.comparison()
    if not comparison.empty:
        comparison["params"] = comparison["params"].astype(str)
    sections.append(_table(comparison.set_index("model") if not comparison.empty else comparison))

    for model_result in result.results:
        sections.append(f"<h3>{html.escape(model_result.model_name)}: rolling-origin folds</h3>")
        sections.append(_table(model_result.cv.fold_metrics))

    if result.results:
        test = result.split.test
        predictions = {r.model_name: r.predictions for r in result.results}
        intervals = next((r.intervals for r in result.results if r.intervals is not None), None)
        fig = plot_forecast_vs_actual(
            test[DATE_COLUMN], test[target], predictions, title="Test period", intervals=intervals
        )
        sections.append(figure_to_html(fig, "forecast vs actual"))

    return sections


def render_report(result: AnalysisResult, output_path: str | Path, title: str = "Bitcoin market price analysis") -> Path:
    """Write the HTML report and return its path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    generated = datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC")
    body = "\n".join(build_sections(result))
    document = (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>{html.escape(title)}</title><style>{_STYLE}</style></head>\n"
        f"<body><h1>{html.escape(title)}</h1><p>Generated {generated}</p>\n{body}\n</body></html>\n"
    )
    output_path.write_text(document, encoding="utf-8")
    logger.info(f"Report written to {output_path}")
    return output_path


__all__ = ["build_sections", "figure_to_html", "render_report"]
