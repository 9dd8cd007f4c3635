from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pandas as pd


def format_currency(value: object, decimals: int = 2) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    amount = float(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.{decimals}f}"


def format_date(value: Optional[date | datetime | str]) -> str:
    if value is None:
        return "N/A"
    ts = pd.Timestamp(value)
    if pd.isna(ts):
        return "N/A"
    return ts.strftime("%B %d, %Y")


def format_units(value: object) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{int(value):,} units"
