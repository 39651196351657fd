from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .calendar import parse_instant


class EngineState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class TradingSettings:
    start_date: str
    speed_factor: float
    is_active: bool = False
    current_date: Optional[str] = None

    def __post_init__(self):
        validate_speed_factor(self.speed_factor)
        parse_instant(self.start_date)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'startDate': self.start_date,
            'speedFactor': self.speed_factor,
            'isActive': self.is_active,
        }
        if self.current_date is not None:
            data['currentDate'] = self.current_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TradingSettings':
        return cls(
            start_date=data['startDate'],
            speed_factor=data['speedFactor'],
            is_active=bool(data.get('isActive', False)),
            current_date=data.get('currentDate'),
        )


@dataclass
class SettingsUpdate:
    start_date: str
    speed_factor: float
    is_active: Optional[bool] = None


@dataclass
class StockPrice:
    symbol: str
    price: str

    def to_dict(self) -> Dict[str, str]:
        return {'symbol': self.symbol, 'price': self.price}


@dataclass
class TradingStatus:
    """Broadcast-only snapshot; current_date is the M/D/YYYY trade date"""
    is_active: bool
    current_date: str
    stock_prices: List[StockPrice] = field(default_factory=list)

    def price_of(self, symbol: str) -> Optional[str]:
        for item in self.stock_prices:
            if item.symbol == symbol:
                return item.price
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isActive': self.is_active,
            'currentDate': self.current_date,
            'stockPrices': [item.to_dict() for item in self.stock_prices],
        }


def validate_speed_factor(speed_factor: float):
    if isinstance(speed_factor, bool) or not isinstance(speed_factor, (int, float)):
        raise ValueError(f"Speed factor must be a number, got {speed_factor!r}")
    if not speed_factor > 0:
        raise ValueError(f"Speed factor must be positive, got {speed_factor}")
