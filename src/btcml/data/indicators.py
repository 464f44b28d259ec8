"""
World Bank development indicators.

The raw workbook is wide: one row per (country, indicator) and one column per
year label. It is reshaped to one row per (country, indicator, year), thinned
to indicators with enough observations, and optionally tagged with a region
taken from a separate country -> region workbook.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from btcml.errors import ConfigurationError, JoinIntegrityError, SchemaError
from btcml.utils import get_logger

from .join import YEAR_COLUMN

logger = get_logger("data.indicators")

YEAR_PATTERN = re.compile(r"^\d{4}$")

ID_COLUMNS = {
    "Country Name": "country",
    "Country Code": "country_code",
    "Indicator Name": "indicator",
    "Indicator Code": "indicator_code",
}
LONG_COLUMNS = [*ID_COLUMNS.values(), YEAR_COLUMN, "value"]

SheetName = Union[str, int]


def _read_table(path: Path, sheet_name: SheetName = 0, skiprows: int = 0) -> pd.DataFrame:
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path, skiprows=skiprows)
    return pd.read_excel(path, sheet_name=sheet_name, skiprows=skiprows)


def year_columns(df: pd.DataFrame) -> list:
    """Columns whose label is a 4-digit year."""
    return [col for col in df.columns if YEAR_PATTERN.match(str(col).strip())]


def melt_indicators(wide: pd.DataFrame) -> pd.DataFrame:
    """Reshape the wide indicator table to long form."""
    missing = [col for col in ID_COLUMNS if col not in wide.columns]
    if missing:
        raise SchemaError(f"Indicator table is missing columns: {missing}")

    years = year_columns(wide)
    if not years:
        raise SchemaError("Indicator table has no 4-digit year columns")

    long = wide.melt(
        id_vars=list(ID_COLUMNS), value_vars=years, var_name=YEAR_COLUMN, value_name="value"
    )
    long = long.rename(columns=ID_COLUMNS)
    long[YEAR_COLUMN] = long[YEAR_COLUMN].astype(str).str.strip().astype(int)
    long["value"] = pd.to_numeric(long["value"], errors="coerce")
    return long[LONG_COLUMNS].sort_values(["country", "indicator_code", YEAR_COLUMN]).reset_index(drop=True)


def read_indicator_workbook(
    path: str | Path,
    sheet_name: SheetName = 0,
    skiprows: int = 0,
) -> pd.DataFrame:
    """
    Read a World Bank style indicator export and return it in long form.

    Args:
        path: .xlsx/.xls workbook or .csv export
        sheet_name: Sheet holding the data (ignored for CSV)
        skiprows: Header rows to skip before the column labels

    Returns:
        DataFrame with columns country, country_code, indicator,
        indicator_code, year, value

    Raises:
        SchemaError: If the id columns or any year column are missing
    """
    wide = _read_table(Path(path), sheet_name=sheet_name, skiprows=skiprows)
    long = melt_indicators(wide)
    logger.info(
        f"Loaded {long['indicator_code'].nunique()} indicators for "
        f"{long['country'].nunique()} countries from {Path(path).name}"
    )
    return long


def missing_fraction(long: pd.DataFrame) -> pd.Series:
    """Share of null values per indicator code across every (country, year) cell."""
    return long["value"].isna().groupby(long["indicator_code"]).mean()


def filter_indicators(long: pd.DataFrame, threshold: float = 0.2) -> pd.DataFrame:
    """
    Drop indicators whose missing fraction is at or above ``threshold``.

    Raises:
        ConfigurationError: If threshold is outside (0, 1]
    """
    if not 0 < threshold <= 1:
        raise ConfigurationError(f"missing threshold must be in (0, 1], got {threshold}")

    fractions = missing_fraction(long)
    keep = fractions[fractions < threshold].index
    dropped = len(fractions) - len(keep)
    if dropped:
        logger.info(f"Dropped {dropped}/{len(fractions)} indicators with >= {threshold:.0%} missing values")
    return long[long["indicator_code"].isin(keep)].reset_index(drop=True)


def read_region_mapping(
    path: str | Path,
    country_column: str = "TableName",
    region_column: str = "Region",
    sheet_name: SheetName = 0,
) -> pd.DataFrame:
    """
    Read the country -> region workbook.

    Raises:
        SchemaError: If either column is missing
        JoinIntegrityError: If a country name appears more than once
    """
    raw = _read_table(Path(path), sheet_name=sheet_name)
    missing = [col for col in (country_column, region_column) if col not in raw.columns]
    if missing:
        raise SchemaError(f"Region mapping is missing columns: {missing}")

    mapping = raw[[country_column, region_column]].rename(
        columns={country_column: "country", region_column: "region"}
    )
    mapping = mapping.dropna(subset=["country"])
    dupes = mapping.loc[mapping["country"].duplicated(), "country"].unique().tolist()
    if dupes:
        raise JoinIntegrityError(f"Region mapping lists countries more than once: {dupes[:5]}")
    return mapping.reset_index(drop=True)


def attach_regions(long: pd.DataFrame, mapping: pd.DataFrame) -> pd.DataFrame:
    """Left join regions onto the long table by exact country name."""
    if mapping["country"].duplicated().any():
        raise JoinIntegrityError("Region mapping lists countries more than once")
    tagged = long.merge(mapping[["country", "region"]], on="country", how="left", validate="many_to_one")
    unmatched = tagged.loc[tagged["region"].isna(), "country"].nunique()
    if unmatched:
        # Aggregates such as "World" or "Euro area" have no region
        logger.debug(f"{unmatched} countries have no region")
    return tagged


def country_features(
    long: pd.DataFrame,
    country: str,
    prefix: str = "wdi_",
) -> pd.DataFrame:
    """
    Pivot one country's indicators to a year x indicator table.

    Column names are ``prefix`` + indicator code with dots replaced by
    underscores. The result has a ``year`` column for joining.
    """
    subset = long[long["country"] == country]
    if subset.empty:
        raise SchemaError(f"Indicator table has no rows for country '{country}'")

    wide = subset.pivot_table(index=YEAR_COLUMN, columns="indicator_code", values="value", aggfunc="first")
    wide.columns = [f"{prefix}{str(code).replace('.', '_').lower()}" for code in wide.columns]
    return wide.reset_index().rename_axis(columns=None)


def region_summary(long: pd.DataFrame, year: Optional[int] = None) -> pd.DataFrame:
    """
    Mean indicator value per region.

    Uses ``year`` when given, otherwise the latest year with any observation.
    Requires the ``region`` column added by ``attach_regions``.
    """
    if "region" not in long.columns:
        raise SchemaError("region_summary needs a 'region' column; call attach_regions first")

    observed = long.dropna(subset=["value", "region"])
    if observed.empty:
        return pd.DataFrame()
    target_year = year if year is not None else int(observed[YEAR_COLUMN].max())
    latest = observed[observed[YEAR_COLUMN] == target_year]
    summary = latest.pivot_table(index="region", columns="indicator_code", values="value", aggfunc="mean")
    return summary.rename_axis(index="region", columns=None)


__all__ = [
    "LONG_COLUMNS",
    "YEAR_PATTERN",
    "attach_regions",
    "country_features",
    "filter_indicators",
    "melt_indicators",
    "missing_fraction",
    "read_indicator_workbook",
    "read_region_mapping",
    "region_summary",
    "year_columns",
]
