import pytest

from welcomesign_sdk import limits


def test_unlimited_and_not_applicable():
    assert limits.is_unlimited(-1)
    assert not limits.is_unlimited(10)
    assert limits.is_limit_not_applicable(None)
    assert not limits.is_limit_not_applicable(0)


@pytest.mark.parametrize(
    "value, expected",
    [(None, "N/A"), (-1, "Unlimited"), (5, "5"), (2500, "2,500")],
)
def test_format_limit(value, expected):
    assert limits.format_limit(value) == expected


def test_format_limit_custom_text():
    assert limits.format_limit(-1, unlimited_text="∞") == "∞"
    assert limits.format_limit(None, na_text="-") == "-"


@pytest.mark.parametrize(
    "value, expected",
    [(None, "N/A"), (0, "Free"), (19, "$19"), (19.5, "$19.5"), (9.999, "$10"), (1299.99, "$1,299.99")],
)
def test_format_price(value, expected):
    assert limits.format_price(value) == expected


def test_format_price_currency():
    assert limits.format_price(10, currency="€") == "€10"


def test_within_limit_and_remaining_capacity():
    assert not limits.is_within_limit(0, None)
    assert limits.is_within_limit(1000, -1)
    assert limits.is_within_limit(2, 3)
    assert not limits.is_within_limit(3, 3)

    assert limits.get_remaining_capacity(1, None) is None
    assert limits.get_remaining_capacity(1, -1) == -1
    assert limits.get_remaining_capacity(1, 3) == 2
    assert limits.get_remaining_capacity(5, 3) == 0
