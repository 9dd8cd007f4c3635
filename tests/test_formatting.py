from datetime import date

from salesboard.formatting import format_currency, format_date, format_units


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-3) == "-$3.00"
    assert format_currency(None) == "N/A"


def test_format_date():
    assert format_date(date(2024, 1, 1)) == "January 01, 2024"
    assert format_date("2024-03-15") == "March 15, 2024"
    assert format_date(None) == "N/A"


def test_format_units():
    assert format_units(1200) == "1,200 units"
