from __future__ import annotations

from typing import List, Optional

import pandas as pd

from salesboard.data import CATEGORY_COL
from salesboard.settings import ALL_CATEGORIES_LABEL


def normalize_category(raw: object) -> Optional[str]:
    if raw is None:
        return None
    try:
        if pd.isna(raw):
            return None
    except (TypeError, ValueError):
        pass
    value = str(raw).strip()
    if not value or value == ALL_CATEGORIES_LABEL:
        return None
    return value


def filter_by_category(df: pd.DataFrame, category: Optional[str]) -> pd.DataFrame:
    if category is None:
        return df
    return df[df[CATEGORY_COL] == category]


def toggle_category(current: Optional[str], clicked: Optional[str]) -> Optional[str]:
    """Clicking the selected category clears it; any other click selects it."""
    clicked = normalize_category(clicked)
    return None if clicked == current else clicked


def list_categories(df: pd.DataFrame) -> List[str]:
    if df.empty or CATEGORY_COL not in df.columns:
        return []
    return [str(c) for c in df[CATEGORY_COL].drop_duplicates().tolist()]
