"""Tests for the price codec and synthetic price steps."""

import random
import re
from decimal import Decimal

import pytest

from broker_exchange.exchange.errors import InvalidPriceError
from broker_exchange.exchange.stocks import format_price, parse_price, synthesize_price

PRICE_RE = re.compile(r"^\$\d+\.\d{2}$")


def test_parse_price_strips_currency_symbol():
    assert parse_price("$182.52") == Decimal("182.52")
    assert parse_price("91.3") == Decimal("91.3")


@pytest.mark.parametrize("value", ["", "$", "$abc", "$1.2.3", "$NaN", None])
def test_parse_price_rejects_malformed(value):
    with pytest.raises(InvalidPriceError):
        parse_price(value)


def test_format_price_two_decimals():
    assert format_price(Decimal("150")) == "$150.00"
    assert format_price(Decimal("0.005")) == "$0.01"
    assert format_price(Decimal("1234.565")) == "$1234.57"


def test_synthesized_price_stays_within_five_percent():
    rng = random.Random(7)
    for start in ("100.00", "0.37", "412.65", "5000.10"):
        price = Decimal(start)
        for _ in range(200):
            next_price = synthesize_price(price, rng)
            assert next_price >= Decimal("0.01")
            assert abs(next_price - price) <= price * Decimal("0.05") + Decimal("0.005")
            assert PRICE_RE.match(format_price(next_price))
            assert next_price == next_price.quantize(Decimal("0.01"))


def test_synthesized_price_floors_at_one_cent():
    class Down:
        def uniform(self, a, b):
            return -1.0

    assert synthesize_price(Decimal("0.01"), Down()) == Decimal("0.01")
    assert synthesize_price(Decimal("0.00"), Down()) == Decimal("0.01")
