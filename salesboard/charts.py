from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

import altair as alt
import pandas as pd

from salesboard.aggregations import (
    DailyTotal,
    HistogramBin,
    PricePoint,
    amount_histogram,
    price_quantity_pairs,
    sum_by_category,
    sum_by_day,
)
from salesboard.errors import EmptyDataError
from salesboard.settings import (
    BAR_CHART_ID,
    BAR_COLOR,
    DISTRIBUTION_CHART_ID,
    HISTOGRAM_COLOR,
    LINE_CHART_ID,
    LINE_COLOR,
    SCATTER_COLOR,
    SCATTER_PLOT_ID,
    SELECTED_COLOR,
    DashboardSettings,
)

alt.data_transformers.disable_max_rows()

logger = logging.getLogger(__name__)

# Name of the click selection on the bar chart; UIs read the clicked category from it.
CATEGORY_SELECTION = "category_click"
CURRENCY_FORMAT = "$,.2f"
DATE_FORMAT = "%B %d, %Y"


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _sized(chart: alt.Chart, settings: DashboardSettings) -> alt.Chart:
    return chart.properties(width=settings.plot_width, height=settings.plot_height)


def bar_chart(totals: Dict[str, int], selection: Optional[str], settings: DashboardSettings) -> alt.Chart:
    data = pd.DataFrame(
        {
            "product_category": list(totals.keys()),
            "units": list(totals.values()),
            "state": ["selected" if k == selection else "default" for k in totals],
        }
    )
    click = alt.selection_point(name=CATEGORY_SELECTION, fields=["product_category"], on="click", empty=False)
    chart = (
        alt.Chart(data)
        .mark_bar(cursor="pointer")
        .encode(
            x=alt.X("product_category:N", title="Product Category", sort=None, axis=alt.Axis(labelAngle=-45)),
            y=alt.Y("units:Q", title="Units Sold"),
            color=alt.Color(
                "state:N",
                scale=alt.Scale(domain=["default", "selected"], range=[BAR_COLOR, SELECTED_COLOR]),
                legend=None,
            ),
            tooltip=[
                alt.Tooltip("product_category:N", title="Category"),
                alt.Tooltip("units:Q", title="Units", format=","),
            ],
        )
        .add_params(click)
    )
    return _sized(chart, settings)


def line_chart(series: List[DailyTotal], selection: Optional[str], settings: DashboardSettings) -> alt.Chart:
    data = pd.DataFrame(
        {
            "date": [pd.Timestamp(p.date) for p in series],
            "units": [p.quantity for p in series],
        }
    )
    chart = (
        alt.Chart(data)
        .mark_line(point=alt.OverlayMarkDef(filled=True, color=LINE_COLOR, opacity=0.7), interpolate="monotone", color=LINE_COLOR, strokeWidth=2)
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("units:Q", title="Units Sold"),
            tooltip=[
                alt.Tooltip("date:T", title="Date", format=DATE_FORMAT),
                alt.Tooltip("units:Q", title="Sales", format=","),
            ],
        )
    )
    return _sized(chart, settings)


def scatter_plot(points: List[PricePoint], selection: Optional[str], settings: DashboardSettings) -> alt.Chart:
    data = pd.DataFrame(
        {
            "unit_price": [p.unit_price for p in points],
            "quantity": [p.quantity for p in points],
        }
    )
    chart = (
        alt.Chart(data)
        .mark_circle(size=50, color=SCATTER_COLOR, opacity=0.6)
        .encode(
            x=alt.X("unit_price:Q", title="Unit Price ($)", axis=alt.Axis(format=CURRENCY_FORMAT)),
            y=alt.Y("quantity:Q", title="Quantity Sold"),
            tooltip=[
                alt.Tooltip("unit_price:Q", title="Price", format=CURRENCY_FORMAT),
                alt.Tooltip("quantity:Q", title="Quantity"),
            ],
        )
    )
    return _sized(chart, settings)


def distribution_chart(bins: List[HistogramBin], selection: Optional[str], settings: DashboardSettings) -> alt.Chart:
    data = pd.DataFrame(
        {
            "x0": [b.x0 for b in bins],
            "x1": [b.x1 for b in bins],
            "count": [b.count for b in bins],
        }
    )
    chart = (
        alt.Chart(data)
        .mark_bar(color=HISTOGRAM_COLOR, opacity=0.7)
        .encode(
            x=alt.X("x0:Q", title="Total Sales Amount", axis=alt.Axis(format=CURRENCY_FORMAT)),
            x2="x1",
            y=alt.Y("count:Q", title="Number of Transactions"),
            tooltip=[
                alt.Tooltip("x0:Q", title="From", format=CURRENCY_FORMAT),
                alt.Tooltip("x1:Q", title="To", format=CURRENCY_FORMAT),
                alt.Tooltip("count:Q", title="Transactions"),
            ],
        )
    )
    return _sized(chart, settings)


class Canvas(Protocol):
    def clear(self, chart_id: str) -> None: ...

    def draw(self, chart_id: str, spec: Dict[str, Any]) -> None: ...


class SpecCanvas:
    """In-memory canvas keeping the latest Vega-Lite spec per chart id."""

    def __init__(self) -> None:
        self.specs: Dict[str, Dict[str, Any]] = {}
        self.draw_count = 0

    def clear(self, chart_id: str) -> None:
        self.specs.pop(chart_id, None)

    def draw(self, chart_id: str, spec: Dict[str, Any]) -> None:
        self.specs[chart_id] = spec
        self.draw_count += 1


@dataclass(frozen=True)
class ChartRenderer:
    chart_id: str
    aggregate: Callable[[pd.DataFrame, DashboardSettings], Any]
    build: Callable[[Any, Optional[str], DashboardSettings], alt.Chart]

    def render(
        self,
        df: pd.DataFrame,
        selection: Optional[str],
        canvas: Canvas,
        settings: DashboardSettings,
        *,
        is_current: Callable[[], bool] = lambda: True,
    ) -> bool:
        """Aggregate ``df`` and replace this chart on ``canvas``.

        Returns False without touching the canvas when there is nothing to
        plot or when a newer render pass has started meanwhile.
        """
        try:
            result = self.aggregate(df, settings)
        except EmptyDataError:
            logger.debug("Skipping %s: no data for selection %r", self.chart_id, selection)
            return False
        spec = to_vega_spec(self.build(result, selection, settings))
        if not is_current():
            logger.debug("Discarding stale render of %s", self.chart_id)
            return False
        canvas.clear(self.chart_id)
        canvas.draw(self.chart_id, spec)
        return True


def default_renderers() -> List[ChartRenderer]:
    return [
        ChartRenderer(BAR_CHART_ID, lambda df, s: sum_by_category(df), bar_chart),
        ChartRenderer(LINE_CHART_ID, lambda df, s: sum_by_day(df), line_chart),
        ChartRenderer(SCATTER_PLOT_ID, lambda df, s: price_quantity_pairs(df), scatter_plot),
        ChartRenderer(DISTRIBUTION_CHART_ID, lambda df, s: amount_histogram(df, s.histogram_bins), distribution_chart),
    ]
