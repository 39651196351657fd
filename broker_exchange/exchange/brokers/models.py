from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
import uuid


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Holding:
    symbol: str
    quantity: int
    average_price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'quantity': self.quantity,
            'averagePrice': str(self.average_price),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Holding':
        return cls(
            symbol=data['symbol'],
            quantity=int(data['quantity']),
            average_price=Decimal(str(data['averagePrice'])),
        )


@dataclass
class Broker:
    id: str
    name: str
    balance: Decimal
    stocks: List[Holding] = field(default_factory=list)
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)

    @classmethod
    def create(cls, name: str, balance: Decimal = Decimal('0')) -> 'Broker':
        return cls(id=str(uuid.uuid4()), name=name, balance=Decimal(balance))

    def _touch(self):
        self.updated_at = _utc_now()

    def find_holding(self, symbol: str) -> Optional[Holding]:
        for holding in self.stocks:
            if holding.symbol == symbol:
                return holding
        return None

    def buy_stock(self, symbol: str, quantity: int, price: Decimal) -> bool:
        """Debit cash and average the purchase into the holding; False if unaffordable"""
        total_cost = price * quantity
        if quantity <= 0 or self.balance < total_cost:
            return False

        holding = self.find_holding(symbol)
        if holding:
            total_quantity = holding.quantity + quantity
            total_value = holding.average_price * holding.quantity + total_cost
            holding.average_price = total_value / total_quantity
            holding.quantity = total_quantity
        else:
            self.stocks.append(Holding(symbol=symbol, quantity=quantity, average_price=price))

        self.balance -= total_cost
        self._touch()
        return True

    def sell_stock(self, symbol: str, quantity: int, price: Decimal) -> bool:
        """Credit cash and reduce the holding; False if not enough shares"""
        holding = self.find_holding(symbol)
        if quantity <= 0 or holding is None or holding.quantity < quantity:
            return False

        holding.quantity -= quantity
        if holding.quantity == 0:
            self.stocks.remove(holding)

        self.balance += price * quantity
        self._touch()
        return True

    def update_balance(self, amount: Decimal):
        self.balance = Decimal(amount)
        self._touch()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'balance': str(self.balance),
            'stocks': [holding.to_dict() for holding in self.stocks],
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Broker':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            balance=Decimal(str(data.get('balance', '0'))),
            stocks=[Holding.from_dict(item) for item in data.get('stocks') or []],
            created_at=data.get('createdAt') or _utc_now(),
            updated_at=data.get('updatedAt') or _utc_now(),
        )


@dataclass
class BrokerPatch:
    name: Optional[str] = None
    balance: Optional[Decimal] = None

    def apply(self, broker: Broker) -> Broker:
        if self.name is not None:
            broker.name = self.name
        if self.balance is not None:
            broker.update_balance(self.balance)
        broker.updated_at = _utc_now()
        return broker
