"""
Renderer for Sun Resource

Takes the MonthlyTable from the reshaper and produces:
- LongTable: one row per (month, series) with month as an ordered categorical
- A line chart with point markers, one series per irradiance type

Uses matplotlib's Agg backend so charts render without a display.
"""

import logging
from pathlib import Path
from typing import Mapping, Optional, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from sun_resource.errors import RenderError  # noqa: E402
from sun_resource.months import MONTH_LABELS  # noqa: E402
from sun_resource.reshaper import MONTH_COLUMN  # noqa: E402

logger = logging.getLogger(__name__)

Y_LABEL = "Irradiance (kWh/m²/day)"

SERIES_LABELS = {
    "avg_dni": "DNI",
    "avg_ghi": "GHI",
    "avg_lat_tilt": "Latitude Tilt",
}

MARKERS = ["o", "s", "^", "D", "v", "P", "X"]


def series_label(name: str, annual: Optional[float] = None) -> str:
    """Readable legend label, with the annual average when known."""
    label = SERIES_LABELS.get(name, name)
    if annual is not None:
        label += f" (annual {annual:.2f})"
    return label


def location_title(lat: float, lon: float) -> str:
    """Chart title naming the queried point, e.g. 'Solar Resource at 40.00°N, 105.00°W'."""
    ns = "N" if lat >= 0 else "S"
    ew = "E" if lon >= 0 else "W"
    return f"Solar Resource at {abs(lat):.2f}°{ns}, {abs(lon):.2f}°{ew}"


def to_long_table(table: pd.DataFrame) -> pd.DataFrame:
    """
    Melt the MonthlyTable into long form.

    Returns:
        DataFrame with columns month, series_name, value. Rows are grouped by
        series (table column order) and run Jan..Dec inside each group.
    """
    if MONTH_COLUMN not in table.columns:
        raise RenderError(f"Table has no '{MONTH_COLUMN}' column")

    series_names = [c for c in table.columns if c != MONTH_COLUMN]
    long_table = table.melt(
        id_vars=MONTH_COLUMN,
        value_vars=series_names,
        var_name="series_name",
        value_name="value",
    )
    long_table[MONTH_COLUMN] = pd.Categorical(
        long_table[MONTH_COLUMN], categories=list(MONTH_LABELS), ordered=True
    )
    long_table["series_name"] = pd.Categorical(
        long_table["series_name"], categories=series_names, ordered=True
    )
    long_table = long_table.sort_values(["series_name", MONTH_COLUMN]).reset_index(drop=True)
    long_table["series_name"] = long_table["series_name"].astype(str)

    logger.debug(f"[to_long_table] {len(long_table)} rows for {len(series_names)} series")
    return long_table


def render_chart(
    table: pd.DataFrame,
    title: str,
    path: Optional[Union[str, Path]] = None,
    annual: Optional[Mapping[str, float]] = None,
) -> Figure:
    """
    Draw the monthly irradiance chart.

    Args:
        table: MonthlyTable from reshape()
        title: Chart title (see location_title())
        path: Where to save the figure; format follows the suffix (.png, .pdf)
        annual: Optional series -> annual average, shown in the legend

    Returns:
        The matplotlib Figure (caller closes it)
    """
    long_table = to_long_table(table)
    annual = annual or {}

    fig, ax = plt.subplots(figsize=(9, 5))
    x = range(len(MONTH_LABELS))

    try:
        for i, (name, group) in enumerate(long_table.groupby("series_name", sort=False)):
            group = group.sort_values(MONTH_COLUMN)
            ax.plot(
                x,
                group["value"].to_numpy(),
                marker=MARKERS[i % len(MARKERS)],
                lw=1.8,
                label=series_label(name, annual.get(name)),
            )

        ax.set_xticks(list(x))
        ax.set_xticklabels(MONTH_LABELS)
        ax.set_xlabel("Month")
        ax.set_ylabel(Y_LABEL)
        ax.set_title(title)
        ax.set_ylim(bottom=0)
        ax.grid(True, ls=":", lw=0.6)
        ax.legend(loc="best")
        fig.tight_layout()
    except Exception:
        plt.close(fig)
        raise

    if path is not None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(path, bbox_inches="tight")
        except (OSError, ValueError) as e:
            plt.close(fig)
            raise RenderError(f"Could not save chart to {path}: {e}") from e
        logger.info(f"[render_chart] Wrote {path}")

    return fig
