from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional


DATA_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_PATH = DATA_DIR / "Coffee_Shop_Sales.csv"

SVG_WIDTH = 500
SVG_HEIGHT = 300
MARGINS = {"top": 40, "right": 40, "bottom": 60, "left": 60}

CACHE_DURATION_SECONDS = 60 * 5
HISTOGRAM_BINS = 20
RESIZE_DEBOUNCE_SECONDS = 0.25

BAR_CHART_ID = "bar-chart"
LINE_CHART_ID = "line-chart"
SCATTER_PLOT_ID = "scatter-plot"
DISTRIBUTION_CHART_ID = "distribution-chart"
CHART_IDS = (BAR_CHART_ID, LINE_CHART_ID, SCATTER_PLOT_ID, DISTRIBUTION_CHART_ID)

BAR_COLOR = "#1f77b4"
SELECTED_COLOR = "#ff7f0e"
LINE_COLOR = "#2ecc71"
SCATTER_COLOR = "#9b59b6"
HISTOGRAM_COLOR = "#2ecc71"

ALL_CATEGORIES_LABEL = "All Categories"


@dataclass(frozen=True)
class DashboardSettings:
    data_path: Path = DEFAULT_DATA_PATH
    cache_seconds: float = CACHE_DURATION_SECONDS
    histogram_bins: int = HISTOGRAM_BINS
    debounce_seconds: float = RESIZE_DEBOUNCE_SECONDS
    width: int = SVG_WIDTH
    height: int = SVG_HEIGHT
    margins: Dict[str, int] = field(default_factory=lambda: dict(MARGINS))

    @property
    def plot_width(self) -> int:
        return max(1, self.width - self.margins["left"] - self.margins["right"])

    @property
    def plot_height(self) -> int:
        return max(1, self.height - self.margins["top"] - self.margins["bottom"])


def _as_float(value: object, default: float) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except Exception:
        return default


def _as_int(value: object, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except Exception:
        return default


def normalize_settings(raw: Mapping[str, object]) -> DashboardSettings:
    data_path = raw.get("data_path") or DEFAULT_DATA_PATH
    cache_seconds = max(0.0, _as_float(raw.get("cache_seconds", CACHE_DURATION_SECONDS), CACHE_DURATION_SECONDS))
    bins = _as_int(raw.get("histogram_bins", HISTOGRAM_BINS), HISTOGRAM_BINS)
    bins = max(1, min(200, bins))
    debounce = max(0.0, _as_float(raw.get("debounce_seconds", RESIZE_DEBOUNCE_SECONDS), RESIZE_DEBOUNCE_SECONDS))
    return DashboardSettings(
        data_path=Path(str(data_path)),
        cache_seconds=cache_seconds,
        histogram_bins=bins,
        debounce_seconds=debounce,
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> DashboardSettings:
    """Build settings from ``SALES_*`` environment variables, falling back to defaults."""
    env = os.environ if environ is None else environ
    raw: Dict[str, object] = {}
    if env.get("SALES_DATA_PATH"):
        raw["data_path"] = env["SALES_DATA_PATH"]
    if env.get("SALES_CACHE_SECONDS"):
        raw["cache_seconds"] = env["SALES_CACHE_SECONDS"]
    if env.get("SALES_HISTOGRAM_BINS"):
        raw["histogram_bins"] = env["SALES_HISTOGRAM_BINS"]
    if env.get("SALES_DEBOUNCE_SECONDS"):
        raw["debounce_seconds"] = env["SALES_DEBOUNCE_SECONDS"]
    return normalize_settings(raw)
