import pytest

from jobapp.utils.currency import format_currency


@pytest.mark.parametrize(
    "amount,code,expected",
    [
        (1234.5, "MYR", "RM 1,234.50"),
        ("112.5", "MYR", "RM 112.50"),
        (0, "USD", "$ 0.00"),
        (12000, "VND", "12,000 ₫"),
        (1500.4, "JPY", "¥ 1,500"),
        (10, "myr", "RM 10.00"),
        (10, "XYZ", "RM 10.00"),
    ],
)
def test_format_currency(amount, code, expected):
    assert format_currency(amount, code) == expected


@pytest.mark.parametrize("amount", [None, "abc", float("nan")])
def test_invalid_amounts_render_as_dash(amount):
    assert format_currency(amount) == "-"


def test_show_code():
    assert format_currency(5, "SGD", show_code=True) == "S$ 5.00 SGD"
