from __future__ import annotations

import logging
import threading
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from salesboard.aggregations import (
    amount_histogram,
    price_quantity_pairs,
    sum_by_category,
    sum_by_day,
    summarize,
)
from salesboard.charts import Canvas, ChartRenderer, default_renderers
from salesboard.data import DataCache
from salesboard.debounce import Debouncer
from salesboard.errors import EmptyDataError, LoadError
from salesboard.filters import filter_by_category, normalize_category, toggle_category
from salesboard.settings import DashboardSettings


logger = logging.getLogger(__name__)


class SelectionController:
    """Holds the selected category and re-renders every chart when it changes.

    Each change bumps ``version``; a render pass started for an older version
    does not draw, so the latest selection always wins.
    """

    def __init__(
        self,
        cache: DataCache,
        canvas: Canvas,
        renderers: Optional[Sequence[ChartRenderer]] = None,
        settings: Optional[DashboardSettings] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self.cache = cache
        self.canvas = canvas
        self.renderers: List[ChartRenderer] = list(renderers) if renderers is not None else default_renderers()
        self.settings = settings or DashboardSettings()
        self._selection: Optional[str] = None
        self._version = 0
        self._lock = threading.Lock()
        self._resize = Debouncer(self.refresh, self.settings.debounce_seconds, timer_factory)

    @property
    def selection(self) -> Optional[str]:
        return self._selection

    @property
    def version(self) -> int:
        return self._version

    def select(self, category: Optional[str]) -> bool:
        with self._lock:
            self._selection = normalize_category(category)
            self._version += 1
            version = self._version
            selection = self._selection
        return self._render_all(selection, version)

    def toggle(self, category: Optional[str]) -> bool:
        return self.select(toggle_category(self._selection, category))

    def reset(self) -> bool:
        return self.select(None)

    def refresh(self) -> bool:
        return self.select(self._selection)

    def schedule_refresh(self) -> None:
        """Debounced refresh for bursts of resize events."""
        self._resize.trigger()

    def _render_all(self, selection: Optional[str], version: int) -> bool:
        try:
            data = self.cache.get()
        except LoadError:
            logger.exception("Loading sales data failed; keeping previous charts")
            return False
        subset = filter_by_category(data, selection)

        def is_current() -> bool:
            return self._version == version

        for renderer in self.renderers:
            renderer.render(subset, selection, self.canvas, self.settings, is_current=is_current)
        return True

    def current_subset(self) -> pd.DataFrame:
        return filter_by_category(self.cache.get(), self._selection)

    def snapshot(self) -> Dict[str, Any]:
        """Aggregation payloads for the current selection (JSON-friendly)."""
        selection = self._selection
        subset = filter_by_category(self.cache.get(), selection)
        try:
            histogram = [asdict(b) for b in amount_histogram(subset, self.settings.histogram_bins)]
        except EmptyDataError:
            histogram = []
        return {
            "selection": selection,
            "version": self._version,
            "summary": summarize(subset),
            "by_category": sum_by_category(subset),
            "by_day": [{"date": p.date.isoformat(), "quantity": p.quantity} for p in sum_by_day(subset)],
            "price_pairs": [asdict(p) for p in price_quantity_pairs(subset)],
            "histogram": histogram,
        }
