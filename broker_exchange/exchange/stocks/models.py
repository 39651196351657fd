from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .pricing import parse_price


@dataclass
class HistoricalPrice:
    date: str
    open: str

    def to_dict(self) -> Dict[str, str]:
        return {'date': self.date, 'open': self.open}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HistoricalPrice':
        return cls(date=str(data['date']), open=str(data['open']))


@dataclass
class Stock:
    symbol: str
    company_name: str = ''
    is_active: bool = False
    current_price: str = '$0.00'
    historical_data: List[HistoricalPrice] = field(default_factory=list)

    def update_current_price(self, price: str):
        self.current_price = price

    def add_historical_data(self, entry: HistoricalPrice):
        self.historical_data.append(entry)

    def get_current_price(self) -> Decimal:
        return parse_price(self.current_price)

    def find_historical_price(self, date: str) -> Optional[HistoricalPrice]:
        """First entry recorded for the given date key"""
        for entry in self.historical_data:
            if entry.date == date:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'companyName': self.company_name,
            'isActive': self.is_active,
            'currentPrice': self.current_price,
            'historicalData': [entry.to_dict() for entry in self.historical_data],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], symbol: Optional[str] = None) -> 'Stock':
        return cls(
            symbol=data.get('symbol') or symbol,
            company_name=data.get('companyName') or '',
            is_active=bool(data.get('isActive', False)),
            current_price=data.get('currentPrice') or '$0.00',
            historical_data=[HistoricalPrice.from_dict(entry) for entry in data.get('historicalData') or []],
        )


@dataclass
class StockPatch:
    """Named optional fields applied over an existing stock; None means untouched."""
    company_name: Optional[str] = None
    is_active: Optional[bool] = None
    current_price: Optional[str] = None
    historical_data: Optional[List[HistoricalPrice]] = None

    def apply(self, stock: Stock) -> Stock:
        if self.company_name is not None:
            stock.company_name = self.company_name
        if self.is_active is not None:
            stock.is_active = self.is_active
        if self.current_price is not None:
            stock.current_price = self.current_price
        if self.historical_data is not None:
            stock.historical_data = list(self.historical_data)
        return stock
