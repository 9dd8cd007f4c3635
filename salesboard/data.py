from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Iterator, Optional

import numpy as np
import pandas as pd

from salesboard.errors import LoadError
from salesboard.settings import CACHE_DURATION_SECONDS


logger = logging.getLogger(__name__)

DATE_COL = "transaction_date"
CATEGORY_COL = "product_category"
QTY_COL = "transaction_qty"
PRICE_COL = "unit_price"
AMOUNT_COL = "total_amount"

REQUIRED_COLUMNS = (DATE_COL, CATEGORY_COL, QTY_COL, PRICE_COL)


@dataclass(frozen=True)
class Transaction:
    date: date
    category: str
    quantity: int
    unit_price: float

    @property
    def amount(self) -> float:
        return self.quantity * self.unit_price


def parse_transactions(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize a raw sales frame into the dashboard's transaction schema.

    Dates are truncated to the day, quantity and price are numeric and
    ``total_amount`` is derived from them. Unparseable or negative rows are dropped.
    """
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise LoadError(f"Sales data is missing required columns: {', '.join(missing)}")

    df[DATE_COL] = pd.to_datetime(df[DATE_COL], errors="coerce").dt.normalize()
    df[QTY_COL] = pd.to_numeric(df[QTY_COL], errors="coerce")
    df[PRICE_COL] = pd.to_numeric(df[PRICE_COL], errors="coerce")
    category = df[CATEGORY_COL].astype("string").str.strip()
    df[CATEGORY_COL] = category.replace({"": pd.NA})

    valid = df[list(REQUIRED_COLUMNS)].notna().all(axis=1)
    valid &= np.isfinite(df[QTY_COL]) & np.isfinite(df[PRICE_COL])
    valid &= (df[QTY_COL] >= 0) & (df[PRICE_COL] >= 0)
    # Quantities are whole units; fractional counts do not parse.
    valid &= df[QTY_COL] % 1 == 0
    dropped = int((~valid).sum())
    if dropped:
        logger.warning("Dropped %d sales rows with missing or invalid values", dropped)
    df = df[valid].reset_index(drop=True)

    df[QTY_COL] = df[QTY_COL].astype("int64")
    df[PRICE_COL] = df[PRICE_COL].astype("float64")
    df[CATEGORY_COL] = df[CATEGORY_COL].astype(str)
    df[AMOUNT_COL] = df[QTY_COL] * df[PRICE_COL]
    return df


def load_transactions(path: Path | str) -> pd.DataFrame:
    try:
        raw = pd.read_csv(path)
    except (OSError, ValueError, pd.errors.ParserError) as exc:
        raise LoadError(f"Could not read sales data from {path}: {exc}") from exc
    df = parse_transactions(raw)
    logger.info("Loaded %d transactions from %s", len(df), path)
    return df


def iter_transactions(df: pd.DataFrame) -> Iterator[Transaction]:
    for row in df[list(REQUIRED_COLUMNS)].itertuples(index=False):
        yield Transaction(
            date=pd.Timestamp(row[0]).date(),
            category=str(row[1]),
            quantity=int(row[2]),
            unit_price=float(row[3]),
        )


@dataclass(frozen=True)
class CacheEntry:
    dataset: pd.DataFrame
    fetched_at: float


class DataCache:
    """Memoizes the parsed dataset for a fixed freshness window.

    Only one load runs at a time; callers that arrive while a load is in
    flight wait for it and then reuse its result.
    """

    def __init__(
        self,
        loader: Callable[[], pd.DataFrame],
        *,
        ttl_seconds: float = CACHE_DURATION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._lock = threading.Lock()

    @classmethod
    def from_path(cls, path: Path | str, **kwargs) -> "DataCache":
        return cls(lambda: load_transactions(path), **kwargs)

    @property
    def fetched_at(self) -> Optional[float]:
        return self._entry.fetched_at if self._entry is not None else None

    def is_fresh(self) -> bool:
        entry = self._entry
        return entry is not None and self._clock() - entry.fetched_at < self._ttl

    def invalidate(self) -> None:
        self._entry = None

    def get(self) -> pd.DataFrame:
        entry = self._entry
        if entry is not None and self._clock() - entry.fetched_at < self._ttl:
            return entry.dataset
        with self._lock:
            # Another caller may have finished the load while we waited.
            entry = self._entry
            if entry is not None and self._clock() - entry.fetched_at < self._ttl:
                return entry.dataset
            started = self._clock()
            try:
                dataset = self._loader()
            except LoadError:
                raise
            except Exception as exc:
                raise LoadError(f"Loading sales data failed: {exc}") from exc
            self._entry = CacheEntry(dataset=dataset, fetched_at=started)
            return dataset
