import pandas as pd
import pytest

from salesboard.data import parse_transactions


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def raw_sales():
    return pd.DataFrame(
        {
            "transaction_id": [1, 2, 3],
            "transaction_date": ["2024-01-01", "2024-01-01", "2024-01-02"],
            "product_category": ["Coffee", "Tea", "Coffee"],
            "transaction_qty": [2, 1, 3],
            "unit_price": [3.00, 2.50, 3.00],
        }
    )


@pytest.fixture
def sales(raw_sales):
    return parse_transactions(raw_sales)


@pytest.fixture
def sales_csv(tmp_path, raw_sales):
    path = tmp_path / "sales.csv"
    raw_sales.to_csv(path, index=False)
    return path


class FakeTimer:
    def __init__(self, delay, function, args=()):
        self.delay = delay
        self.function = function
        self.args = args
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args)


class TimerFactory:
    """Stands in for threading.Timer; tests fire timers by hand."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, function, args=()):
        timer = FakeTimer(delay, function, args)
        self.timers.append(timer)
        return timer


@pytest.fixture
def timer_factory():
    return TimerFactory()
