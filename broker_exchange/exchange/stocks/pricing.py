"""
Price codec and synthetic price generation.
Prices travel as '$'-prefixed two-decimal strings; arithmetic is done on Decimal.
"""

import random
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from ...utils.config import Config
from ..errors import InvalidPriceError

CENT = Decimal('0.01')


def parse_price(value: str) -> Decimal:
    """'$182.52' -> Decimal('182.52')"""
    if not isinstance(value, str):
        raise InvalidPriceError(f"Price must be a string, got {type(value).__name__}")
    text = value.strip()
    if text.startswith('$'):
        text = text[1:]
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidPriceError(f"Malformed price: {value!r}") from None
    if not amount.is_finite():
        raise InvalidPriceError(f"Malformed price: {value!r}")
    return amount


def format_price(amount: Union[Decimal, int, float, str]) -> str:
    """Decimal('182.5') -> '$182.50'"""
    quantized = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"${quantized:.2f}"


def synthesize_price(current: Decimal, rng: Optional[random.Random] = None) -> Decimal:
    """Random walk step: uniform change within +/- PRICE_CHANGE_LIMIT, floored at MIN_PRICE"""
    rng = rng or random
    factor = Decimal(repr(rng.uniform(-1.0, 1.0)))
    change = current * Config.PRICE_CHANGE_LIMIT * factor
    next_price = max(Config.MIN_PRICE, current + change)
    return next_price.quantize(CENT, rounding=ROUND_HALF_UP)
