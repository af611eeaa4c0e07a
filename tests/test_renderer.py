"""
Tests for the Renderer (MonthlyTable -> LongTable -> chart)

Run with: python -m pytest tests/test_renderer.py -v
"""

import logging

import matplotlib.pyplot as plt
import pytest

from sun_resource.errors import RenderError
from sun_resource.months import MONTH_LABELS
from sun_resource.renderer import (
    Y_LABEL,
    location_title,
    render_chart,
    series_label,
    to_long_table,
)
from sun_resource.reshaper import reshape

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


@pytest.fixture
def table(sample_outputs):
    return reshape(sample_outputs)


class TestLongTable:

    def test_columns_and_size(self, table):
        long_table = to_long_table(table)
        logger.info(f"[TEST] Long table shape: {long_table.shape}")
        assert list(long_table.columns) == ["month", "series_name", "value"]
        assert len(long_table) == 12 * 3

    def test_month_is_ordered_categorical(self, table):
        month = to_long_table(table)["month"]
        assert month.cat.ordered
        assert list(month.cat.categories) == list(MONTH_LABELS)

    def test_grouped_by_series_in_column_order(self, table):
        long_table = to_long_table(table)
        names = long_table["series_name"].tolist()
        assert names[:12] == ["avg_dni"] * 12
        assert names[12:24] == ["avg_ghi"] * 12
        assert names[24:] == ["avg_lat_tilt"] * 12
        assert list(long_table["month"][:12]) == list(MONTH_LABELS)

    def test_values_match_table(self, table):
        long_table = to_long_table(table)
        jul_ghi = long_table[(long_table["month"] == "Jul") & (long_table["series_name"] == "avg_ghi")]
        assert jul_ghi["value"].tolist() == [5.98]

    def test_table_untouched(self, table):
        before = table.copy()
        to_long_table(table)
        assert table.equals(before)

    def test_requires_month_column(self, table):
        with pytest.raises(RenderError):
            to_long_table(table.drop(columns=["month"]))


class TestLabels:

    @pytest.mark.parametrize("lat, lon, expected", [
        (40.0, -105.0, "Solar Resource at 40.00°N, 105.00°W"),
        (-33.86, 151.21, "Solar Resource at 33.86°S, 151.21°E"),
        (0.0, 0.0, "Solar Resource at 0.00°N, 0.00°E"),
    ])
    def test_location_title(self, lat, lon, expected):
        assert location_title(lat, lon) == expected

    def test_series_label(self):
        assert series_label("avg_dni") == "DNI"
        assert series_label("avg_lat_tilt", 4.66) == "Latitude Tilt (annual 4.66)"
        assert series_label("avg_tilt_at_10") == "avg_tilt_at_10"


class TestRenderChart:

    def test_chart_contents(self, table):
        logger.info("[TEST] Rendering chart in memory...")
        fig = render_chart(table, "Solar Resource at 40.00°N, 105.00°W")
        try:
            ax = fig.axes[0]
            assert ax.get_ylabel() == Y_LABEL
            assert ax.get_title() == "Solar Resource at 40.00°N, 105.00°W"
            assert [t.get_text() for t in ax.get_xticklabels()] == list(MONTH_LABELS)

            lines = ax.get_lines()
            assert len(lines) == 3, "One line per series"
            for line in lines:
                assert line.get_marker() not in (None, "None", ""), "Lines carry point markers"
            assert list(lines[0].get_ydata()) == table["avg_dni"].tolist()

            legend = [t.get_text() for t in ax.get_legend().get_texts()]
            assert legend == ["DNI", "GHI", "Latitude Tilt"]
        finally:
            plt.close(fig)

    def test_annual_in_legend(self, table):
        fig = render_chart(table, "t", annual={"avg_ghi": 4.0})
        try:
            legend = [t.get_text() for t in fig.axes[0].get_legend().get_texts()]
            assert legend[1] == "GHI (annual 4.00)"
        finally:
            plt.close(fig)

    def test_figure_closed_when_drawing_fails(self, table):
        open_before = plt.get_fignums()
        with pytest.raises(ValueError):
            render_chart(table, "t", annual={"avg_dni": "not-a-number"})
        assert plt.get_fignums() == open_before, "Failed figure must not stay open"

    @pytest.mark.parametrize("suffix", ["png", "pdf"])
    def test_saves_file(self, table, tmp_path, suffix):
        path = tmp_path / "charts" / f"monthly.{suffix}"
        fig = render_chart(table, "t", path=path)
        plt.close(fig)

        logger.info(f"[TEST] Chart written to {path}")
        assert path.exists()
        assert path.stat().st_size > 0

    def test_unwritable_path(self, table, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(RenderError):
            render_chart(table, "t", path=blocker / "chart.png")
