"""Core (UI-agnostic) sales dashboard logic.

This package contains:
- data loading (CSV -> pandas) behind a time-boxed cache
- category filtering and the four chart aggregations
- chart helpers (Altair -> Vega-Lite spec dict)
- the selection controller that keeps all charts on one category
"""
