from typing import Optional

import pandas as pd
import streamlit as st

from salesboard.charts import CATEGORY_SELECTION, SpecCanvas
from salesboard.data import DataCache
from salesboard.errors import LoadError
from salesboard.formatting import format_currency, format_date, format_units
from salesboard.selection import SelectionController
from salesboard.settings import (
    BAR_CHART_ID,
    DISTRIBUTION_CHART_ID,
    LINE_CHART_ID,
    SCATTER_PLOT_ID,
    load_settings,
)

CHART_TITLES = {
    BAR_CHART_ID: "Units Sold by Category",
    LINE_CHART_ID: "Daily Units Sold",
    SCATTER_PLOT_ID: "Unit Price vs Quantity",
    DISTRIBUTION_CHART_ID: "Transaction Amount Distribution",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin: 6px 0 12px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@st.cache_resource
def get_cache() -> DataCache:
    settings = load_settings()
    return DataCache.from_path(settings.data_path, ttl_seconds=settings.cache_seconds)


def get_controller() -> SelectionController:
    if "controller" not in st.session_state:
        controller = SelectionController(get_cache(), SpecCanvas(), settings=load_settings())
        controller.reset()
        st.session_state["controller"] = controller
    return st.session_state["controller"]


def clicked_category(event) -> Optional[str]:
    selection = event.get("selection") if hasattr(event, "get") else None
    points = (selection or {}).get(CATEGORY_SELECTION) or []
    for point in points:
        if point.get("product_category"):
            return str(point["product_category"])
    return None


def sync_bar_click(controller: SelectionController) -> None:
    """Apply the bar chart click from the previous run, once per distinct click."""
    event = st.session_state.get(BAR_CHART_ID)
    clicked = clicked_category(event) if event is not None else None
    last = st.session_state.get("_last_click")
    if clicked == last:
        return
    st.session_state["_last_click"] = clicked
    if clicked is None:
        # Clicking the selected bar again clears the point selection.
        if last is not None and controller.selection == last:
            controller.toggle(last)
    else:
        controller.toggle(clicked)


def filter_chip(selection: Optional[str], days: list) -> str:
    chips = [f"Category: {selection}" if selection else "Category: All"]
    if days:
        chips.append(f"Dates: {format_date(days[0]['date'])} to {format_date(days[-1]['date'])}")
    return "<div class='chip-row'>" + "".join(f"<span class='chip'>{c}</span>" for c in chips) + "</div>"


# ---------- UI setup ----------
st.set_page_config(page_title="Coffee Shop Sales Dashboard", layout="wide")
inject_base_styles()
st.title("Coffee Shop Sales Dashboard")
st.caption("Click a bar to filter every chart by category; click it again to clear.")

controller = get_controller()
sync_bar_click(controller)

top = st.columns([6, 2])
with top[1]:
    if st.button("Reset Filters"):
        controller.reset()
        # The chart keeps its last point selection; do not replay it next run.
        bar_event = st.session_state.get(BAR_CHART_ID)
        st.session_state["_last_click"] = clicked_category(bar_event) if bar_event is not None else None

try:
    snapshot = controller.snapshot()
except LoadError as exc:
    st.error(f"Could not load sales data: {exc}")
    snapshot = None
summary = snapshot["summary"] if snapshot is not None else None
if snapshot is not None and not controller.canvas.specs:
    # The first render pass failed to load; draw now that data is available.
    controller.refresh()

with top[0]:
    st.markdown(filter_chip(controller.selection, snapshot["by_day"] if snapshot else []), unsafe_allow_html=True)

if summary is not None:
    kpi_cols = st.columns(4)
    kpi_cols[0].metric("Transactions", f"{summary['transactions']:,}")
    kpi_cols[1].metric("Units Sold", format_units(summary["units"]))
    kpi_cols[2].metric("Revenue", format_currency(summary["revenue"]))
    kpi_cols[3].metric("Avg Ticket", format_currency(summary["avg_ticket"]))

canvas = controller.canvas
rows = [(BAR_CHART_ID, LINE_CHART_ID), (SCATTER_PLOT_ID, DISTRIBUTION_CHART_ID)]
for row in rows:
    cols = st.columns(2)
    for col, chart_id in zip(cols, row):
        with col:
            st.subheader(CHART_TITLES[chart_id])
            spec = canvas.specs.get(chart_id)
            if spec is None:
                st.info("No data for the current selection.")
            elif chart_id == BAR_CHART_ID:
                st.vega_lite_chart(spec, on_select="rerun", key=BAR_CHART_ID, use_container_width=True)
            else:
                st.vega_lite_chart(spec, use_container_width=True)

subset = pd.DataFrame()
if summary is not None:
    subset = controller.current_subset()
if not subset.empty:
    st.download_button(
        "Export CSV",
        data=subset.to_csv(index=False).encode("utf-8"),
        file_name=f"sales_{controller.selection or 'all'}.csv",
        mime="text/csv",
    )
