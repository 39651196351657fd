"""Shared fixtures for the exchange tests."""

import random

import pytest

from broker_exchange.exchange.stocks import HistoricalPrice, Stock, StocksService
from broker_exchange.exchange.storage import JsonStorage
from broker_exchange.exchange.trading import StatusBroadcaster, TradingEngine


def make_stock(symbol, price, history=None, active=True, name=None):
    return Stock(
        symbol=symbol,
        company_name=name or f"{symbol} Inc.",
        is_active=active,
        current_price=price,
        historical_data=[HistoricalPrice(date, open_) for date, open_ in (history or [])],
    )


@pytest.fixture
def storage(tmp_path):
    return JsonStorage(str(tmp_path / "storage"))


@pytest.fixture
def stocks_service(storage):
    return StocksService(storage)


@pytest.fixture
def broadcaster():
    return StatusBroadcaster()


@pytest.fixture
def published(broadcaster):
    events = []
    broadcaster.subscribe(events.append)
    return events


@pytest.fixture
def engine(storage, stocks_service, broadcaster):
    return TradingEngine(storage, stocks_service, broadcaster, rng=random.Random(42))
