"""
Trading simulation module for Exchange
"""

from .broadcast import StatusBroadcaster
from .engine import TradingEngine
from .models import EngineState, SettingsUpdate, StockPrice, TradingSettings, TradingStatus

__all__ = [
    'EngineState', 'SettingsUpdate', 'StatusBroadcaster', 'StockPrice',
    'TradingEngine', 'TradingSettings', 'TradingStatus',
]
