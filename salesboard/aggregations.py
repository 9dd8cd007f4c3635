from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from salesboard.data import AMOUNT_COL, CATEGORY_COL, DATE_COL, PRICE_COL, QTY_COL
from salesboard.errors import EmptyDataError
from salesboard.settings import HISTOGRAM_BINS


# One cent; keeps bin edges strictly increasing when every amount is equal.
MIN_BIN_WIDTH = 0.01


@dataclass(frozen=True)
class DailyTotal:
    date: date
    quantity: int


@dataclass(frozen=True)
class PricePoint:
    unit_price: float
    quantity: int


@dataclass(frozen=True)
class HistogramBin:
    x0: float
    x1: float
    count: int


def sum_by_category(df: pd.DataFrame) -> Dict[str, int]:
    """Units sold per category, in order of first appearance."""
    if df.empty:
        return {}
    totals = df.groupby(CATEGORY_COL, sort=False)[QTY_COL].sum()
    return {str(k): int(v) for k, v in totals.items()}


def sum_by_day(df: pd.DataFrame) -> List[DailyTotal]:
    if df.empty:
        return []
    days = pd.to_datetime(df[DATE_COL]).dt.normalize()
    totals = df[QTY_COL].groupby(days).sum().sort_index()
    return [DailyTotal(date=pd.Timestamp(d).date(), quantity=int(q)) for d, q in totals.items()]


def price_quantity_pairs(df: pd.DataFrame) -> List[PricePoint]:
    return [
        PricePoint(unit_price=float(p), quantity=int(q))
        for p, q in zip(df[PRICE_COL].tolist(), df[QTY_COL].tolist())
    ]


def _amounts(df: pd.DataFrame) -> np.ndarray:
    if AMOUNT_COL in df.columns:
        series = df[AMOUNT_COL]
    else:
        series = df[QTY_COL] * df[PRICE_COL]
    return pd.to_numeric(series, errors="coerce").dropna().to_numpy(dtype=float)


def histogram_edges(lo: float, hi: float, bins: int = HISTOGRAM_BINS) -> np.ndarray:
    width = max(MIN_BIN_WIDTH, (hi - lo) / bins)
    edges = lo + width * np.arange(bins + 1, dtype=float)
    # Float rounding can leave the last edge just below the maximum.
    edges[-1] = max(edges[-1], hi)
    return edges


def amount_histogram(df: pd.DataFrame, bins: int = HISTOGRAM_BINS) -> List[HistogramBin]:
    """Bin transaction amounts into ``bins`` equal-width buckets over [min, max].

    Every bucket is half-open except the last, which also holds the maximum.
    Raises EmptyDataError when there is nothing to bin.
    """
    values = _amounts(df)
    if values.size == 0:
        raise EmptyDataError("No transaction amounts to bin")
    edges = histogram_edges(float(values.min()), float(values.max()), bins)
    counts, _ = np.histogram(values, bins=edges)
    return [
        HistogramBin(x0=float(edges[i]), x1=float(edges[i + 1]), count=int(counts[i]))
        for i in range(len(counts))
    ]


def summarize(df: pd.DataFrame) -> Dict[str, Any]:
    if df.empty:
        return {"transactions": 0, "units": 0, "revenue": 0.0, "avg_ticket": None}
    revenue = float(_amounts(df).sum())
    return {
        "transactions": int(len(df)),
        "units": int(df[QTY_COL].sum()),
        "revenue": revenue,
        "avg_ticket": revenue / len(df),
    }
