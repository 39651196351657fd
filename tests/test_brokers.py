"""Tests for broker accounts and the toy buy/sell helpers."""

from decimal import Decimal

import pytest

from broker_exchange.exchange.brokers import Broker, BrokerPatch, BrokersService
from broker_exchange.exchange.errors import NotFoundError


@pytest.fixture
def brokers_service(storage):
    return BrokersService(storage)


def test_buy_stock_averages_into_holding():
    broker = Broker.create("alice", Decimal("1000"))

    assert broker.buy_stock("AAPL", 2, Decimal("100"))
    assert broker.buy_stock("AAPL", 2, Decimal("200"))

    holding = broker.find_holding("AAPL")
    assert holding.quantity == 4
    assert holding.average_price == Decimal("150")
    assert broker.balance == Decimal("400")


def test_buy_stock_rejects_insufficient_balance():
    broker = Broker.create("bob", Decimal("50"))
    assert not broker.buy_stock("AAPL", 1, Decimal("100"))
    assert broker.stocks == []
    assert broker.balance == Decimal("50")


def test_sell_stock_removes_empty_holding():
    broker = Broker.create("carol", Decimal("1000"))
    broker.buy_stock("MSFT", 3, Decimal("100"))

    assert not broker.sell_stock("MSFT", 4, Decimal("100"))
    assert broker.sell_stock("MSFT", 3, Decimal("110"))
    assert broker.find_holding("MSFT") is None
    assert broker.balance == Decimal("1030")


def test_sell_unknown_symbol_fails():
    broker = Broker.create("dave", Decimal("10"))
    assert not broker.sell_stock("TSLA", 1, Decimal("1"))


def test_update_balance_replaces_cash():
    broker = Broker.create("frank", Decimal("10"))
    created_at = broker.created_at

    broker.update_balance(Decimal("99.95"))

    assert broker.balance == Decimal("99.95")
    assert broker.to_dict()["balance"] == "99.95"
    assert broker.created_at == created_at


def test_broker_dict_round_trip():
    broker = Broker.create("erin", Decimal("12.50"))
    broker.buy_stock("AMD", 1, Decimal("2.25"))
    restored = Broker.from_dict(broker.to_dict())
    assert restored == broker


@pytest.mark.asyncio
async def test_create_and_find(brokers_service):
    broker = await brokers_service.create("alice", Decimal("100"))
    found = await brokers_service.find_one(broker.id)
    assert found.name == "alice"
    assert found.balance == Decimal("100")
    assert len(await brokers_service.find_all()) == 1


@pytest.mark.asyncio
async def test_update_applies_patch(brokers_service):
    broker = await brokers_service.create("alice", Decimal("100"))
    updated = await brokers_service.update(broker.id, BrokerPatch(balance=Decimal("250")))
    assert updated.name == "alice"
    assert (await brokers_service.find_one(broker.id)).balance == Decimal("250")


@pytest.mark.asyncio
async def test_remove_and_missing(brokers_service):
    broker = await brokers_service.create("alice")
    await brokers_service.remove(broker.id)
    assert await brokers_service.find_all() == []

    with pytest.raises(NotFoundError):
        await brokers_service.find_one(broker.id)
    with pytest.raises(NotFoundError):
        await brokers_service.update("missing", BrokerPatch(name="x"))
