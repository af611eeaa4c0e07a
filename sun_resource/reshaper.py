"""
Reshaper: outputs -> MonthlyTable

Flattens the per-series monthly mappings into one row per calendar month
and one column per series:

    month  avg_dni  avg_ghi  avg_lat_tilt
    Jan    3.12     1.97     3.55
    Feb    3.36     2.70     3.74
    ...

Each series is read through the canonical MONTH_KEYS order, so rows line up
whatever key order the upstream used. A series missing any of the twelve
months fails the whole table; no partial or misaligned rows are produced.
"""

import logging
from typing import Any, Dict, List, Mapping

import pandas as pd

from sun_resource.decoder import SeriesData
from sun_resource.errors import MissingFieldError, SchemaError
from sun_resource.months import MONTH_KEYS, MONTH_LABELS

logger = logging.getLogger(__name__)

MONTH_COLUMN = "month"


def _monthly_of(name: str, series: Any) -> Mapping[str, Any]:
    if isinstance(series, SeriesData):
        return series.monthly
    if isinstance(series, Mapping):
        monthly = series.get("monthly")
        if isinstance(monthly, Mapping):
            return monthly
        raise SchemaError(f"Series '{name}' has no 'monthly' mapping")
    raise SchemaError(f"Series '{name}' must be a mapping, got {type(series).__name__}")


def monthly_values(name: str, series: Any) -> List[float]:
    """
    Read one series' 12 monthly values in calendar order.

    Raises:
        MissingFieldError: any canonical month key is absent
    """
    monthly = _monthly_of(name, series)
    missing = [key for key in MONTH_KEYS if key not in monthly]
    if missing:
        logger.error(f"[reshape] Series '{name}' missing months: {missing}")
        raise MissingFieldError(name, missing)
    extra = [key for key in monthly if key not in MONTH_KEYS]
    if extra:
        logger.warning(f"[reshape] Series '{name}' has non-month keys, ignored: {extra}")
    return [monthly[key] for key in MONTH_KEYS]


def reshape(outputs: Mapping[str, Any]) -> pd.DataFrame:
    """
    Build the MonthlyTable from an ApiResponse.outputs mapping.

    Args:
        outputs: series name -> SeriesData (or raw {"monthly": {...}} mapping)

    Returns:
        DataFrame with 12 rows (Jan..Dec) and columns ['month', *series names].

    Raises:
        SchemaError: outputs is missing, empty, or not a mapping of mappings
        MissingFieldError: a series lacks a canonical month key
    """
    if outputs is None:
        raise SchemaError("outputs is missing")
    if not isinstance(outputs, Mapping):
        raise SchemaError(f"outputs must be a mapping, got {type(outputs).__name__}")
    if not outputs:
        raise SchemaError("outputs is empty")

    columns: Dict[str, List[Any]] = {MONTH_COLUMN: list(MONTH_LABELS)}
    for name, series in outputs.items():
        if name == MONTH_COLUMN:
            raise SchemaError(f"Series name '{MONTH_COLUMN}' collides with the month column")
        columns[name] = monthly_values(name, series)

    table = pd.DataFrame(columns)

    logger.info(
        f"[reshape] Built monthly table: {len(table)} rows x {len(table.columns)} columns"
    )
    return table


def annual_summary(outputs: Mapping[str, Any]) -> Dict[str, float]:
    """Annual average per series, in outputs order. Series without one are skipped."""
    summary: Dict[str, float] = {}
    for name, series in outputs.items():
        if isinstance(series, SeriesData):
            summary[name] = series.annual
        elif isinstance(series, Mapping) and series.get("annual") is not None:
            summary[name] = float(series["annual"])
    return summary
