"""Tests for the four chart aggregations."""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from salesboard.aggregations import (
    MIN_BIN_WIDTH,
    DailyTotal,
    PricePoint,
    amount_histogram,
    price_quantity_pairs,
    sum_by_category,
    sum_by_day,
    summarize,
)
from salesboard.data import parse_transactions
from salesboard.errors import EmptyDataError
from salesboard.filters import filter_by_category


def make_sales(amounts):
    return parse_transactions(
        pd.DataFrame(
            {
                "transaction_date": ["2024-01-01"] * len(amounts),
                "product_category": ["Coffee"] * len(amounts),
                "transaction_qty": [1] * len(amounts),
                "unit_price": amounts,
            }
        )
    )


class TestSumByCategory:

    def test_scenario(self, sales):
        assert sum_by_category(sales) == {"Coffee": 5, "Tea": 1}

    def test_after_selecting_coffee(self, sales):
        assert sum_by_category(filter_by_category(sales, "Coffee")) == {"Coffee": 5}

    def test_first_seen_order(self, sales):
        reordered = sales.iloc[[1, 0, 2]]
        assert list(sum_by_category(reordered)) == ["Tea", "Coffee"]

    def test_sums_match_filtered_records(self, sales):
        totals = sum_by_category(sales)
        for category, total in totals.items():
            assert total == filter_by_category(sales, category)["transaction_qty"].sum()

    def test_empty(self, sales):
        assert sum_by_category(sales.iloc[0:0]) == {}


class TestSumByDay:

    def test_scenario(self, sales):
        assert sum_by_day(sales) == [
            DailyTotal(date=date(2024, 1, 1), quantity=3),
            DailyTotal(date=date(2024, 1, 2), quantity=3),
        ]

    def test_sorted_and_unique(self, sales):
        shuffled = sales.iloc[[2, 1, 0]]
        days = [p.date for p in sum_by_day(shuffled)]
        assert days == sorted(days)
        assert len(days) == len(set(days))

    def test_empty(self, sales):
        assert sum_by_day(sales.iloc[0:0]) == []


def test_price_quantity_pairs(sales):
    assert price_quantity_pairs(sales) == [
        PricePoint(unit_price=3.0, quantity=2),
        PricePoint(unit_price=2.5, quantity=1),
        PricePoint(unit_price=3.0, quantity=3),
    ]


class TestAmountHistogram:

    def test_counts_survive_unparseable_amounts(self):
        df = make_sales(["inf", "3.0", "5.0"])
        bins = amount_histogram(df)
        assert all(np.isfinite([b.x0 for b in bins] + [b.x1 for b in bins]))
        assert sum(b.count for b in bins) == len(df) == 2

    def test_twenty_bins_covering_range(self):
        df = make_sales([1.0, 2.0, 3.0, 11.0])
        bins = amount_histogram(df)
        assert len(bins) == 20
        assert bins[0].x0 == pytest.approx(1.0)
        assert bins[-1].x1 == pytest.approx(11.0)
        assert all(b.x1 - b.x0 == pytest.approx(0.5) for b in bins)

    def test_counts_sum_to_subset_size(self, sales):
        bins = amount_histogram(sales)
        assert sum(b.count for b in bins) == len(sales)

    def test_maximum_lands_in_last_bin(self):
        bins = amount_histogram(make_sales([0.0, 10.0]))
        assert bins[0].count == 1
        assert bins[-1].count == 1

    def test_right_edge_is_exclusive(self):
        # 1.0 sits on the boundary between the first and second bin.
        bins = amount_histogram(make_sales([0.0, 1.0, 20.0]))
        assert bins[0].count == 1
        assert bins[1].count == 1

    def test_each_amount_maps_to_one_bin(self):
        rng = np.random.default_rng(7)
        amounts = rng.uniform(0, 50, size=500).round(2).tolist()
        df = make_sales(amounts)
        bins = amount_histogram(df)
        for amount in df["total_amount"]:
            hits = [
                b for i, b in enumerate(bins)
                if b.x0 <= amount < b.x1 or (i == len(bins) - 1 and amount == b.x1)
            ]
            assert len(hits) == 1
        assert sum(b.count for b in bins) == 500

    def test_all_amounts_equal(self):
        bins = amount_histogram(make_sales([4.5, 4.5, 4.5]))
        assert len(bins) == 20
        assert bins[0].x0 == pytest.approx(4.5)
        assert bins[0].x1 - bins[0].x0 == pytest.approx(MIN_BIN_WIDTH)
        assert bins[0].count == 3
        assert sum(b.count for b in bins) == 3

    def test_custom_bin_count(self, sales):
        assert len(amount_histogram(sales, bins=5)) == 5

    def test_empty_subset_signals_no_data(self, sales):
        with pytest.raises(EmptyDataError):
            amount_histogram(filter_by_category(sales, "Bakery"))


def test_summarize(sales):
    summary = summarize(sales)
    assert summary["transactions"] == 3
    assert summary["units"] == 6
    assert summary["revenue"] == pytest.approx(17.5)
    assert summary["avg_ticket"] == pytest.approx(17.5 / 3)
    assert summarize(sales.iloc[0:0])["avg_ticket"] is None
