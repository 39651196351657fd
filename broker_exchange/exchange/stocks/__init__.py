"""
Stock catalog module for Exchange
"""

from .models import HistoricalPrice, Stock, StockPatch
from .pricing import format_price, parse_price, synthesize_price
from .service import StocksService

__all__ = [
    'HistoricalPrice', 'Stock', 'StockPatch', 'StocksService',
    'format_price', 'parse_price', 'synthesize_price',
]
