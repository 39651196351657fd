"""Tests for the stock catalog."""

import random
from datetime import date

import pytest

from broker_exchange.exchange.errors import ConflictError, NotFoundError
from broker_exchange.exchange.stocks import HistoricalPrice, StockPatch
from broker_exchange.exchange.stocks.seed import generate_historical_data, to_trade_date
from broker_exchange.utils.config import Config

from .conftest import make_stock


@pytest.mark.asyncio
async def test_initialize_seeds_empty_catalog(stocks_service):
    seeded = await stocks_service.initialize(today=date(2024, 3, 1), rng=random.Random(1))
    stocks = await stocks_service.find_all()

    assert seeded is True
    assert {s.symbol for s in stocks} == set(Config.SEED_STOCKS)
    aapl = await stocks_service.find_one("AAPL")
    assert aapl.current_price == "$182.52"
    assert len(aapl.historical_data) == Config.SEED_HISTORY_DAYS + 1
    assert aapl.historical_data[-1].date == "2024-03-01"
    assert not (await stocks_service.find_one("CSCO")).is_active


@pytest.mark.asyncio
async def test_initialize_keeps_existing_catalog(stocks_service):
    await stocks_service.create(make_stock("XYZ", "$10.00"))
    assert await stocks_service.initialize() is False
    assert [s.symbol for s in await stocks_service.find_all()] == ["XYZ"]


def test_seed_history_respects_band():
    data = generate_historical_data(180, 120, 200, days=10, today=date(2024, 1, 10), rng=random.Random(3))
    assert len(data) == 11
    assert data[0]["date"] == "2023-12-31"
    for entry in data:
        assert 120 <= float(entry["open"][1:]) <= 200


@pytest.mark.asyncio
async def test_create_rejects_duplicate_symbol(stocks_service):
    await stocks_service.create(make_stock("AAPL", "$1.00"))
    with pytest.raises(ConflictError):
        await stocks_service.create(make_stock("AAPL", "$2.00"))


@pytest.mark.asyncio
async def test_update_merges_only_provided_fields(stocks_service):
    await stocks_service.create(make_stock("AAPL", "$150.00", [("1/2/2023", "$150.00")], name="Apple"))

    updated = await stocks_service.update("AAPL", StockPatch(current_price="$151.00"))

    assert updated.current_price == "$151.00"
    assert updated.company_name == "Apple"
    assert updated.historical_data == [HistoricalPrice("1/2/2023", "$150.00")]
    assert (await stocks_service.find_one("AAPL")).current_price == "$151.00"


@pytest.mark.asyncio
async def test_update_trading_status_touches_only_flag(stocks_service):
    await stocks_service.create(make_stock("AAPL", "$150.00", [("1/2/2023", "$150.00")]))
    stock = await stocks_service.update_trading_status("AAPL", False)
    assert stock.is_active is False
    assert stock.current_price == "$150.00"
    assert len(stock.historical_data) == 1


@pytest.mark.asyncio
async def test_missing_symbol_raises_not_found(stocks_service):
    with pytest.raises(NotFoundError):
        await stocks_service.find_one("NOPE")
    with pytest.raises(NotFoundError):
        await stocks_service.update("NOPE", StockPatch(is_active=True))
    with pytest.raises(NotFoundError):
        await stocks_service.remove("NOPE")


@pytest.mark.asyncio
async def test_remove_deletes_record(stocks_service):
    await stocks_service.create(make_stock("AAPL", "$1.00"))
    await stocks_service.remove("AAPL")
    assert await stocks_service.find_all() == []


@pytest.mark.asyncio
async def test_persisted_form_uses_camel_case(stocks_service, storage):
    await stocks_service.create(make_stock("AAPL", "$1.00", [("1/2/2023", "$1.00")], name="Apple"))
    document = await storage.load("stocks")
    assert document["AAPL"] == {
        "symbol": "AAPL",
        "companyName": "Apple",
        "isActive": True,
        "currentPrice": "$1.00",
        "historicalData": [{"date": "1/2/2023", "open": "$1.00"}],
    }


def test_to_trade_date_converts_iso_only():
    assert to_trade_date("2023-01-02") == "1/2/2023"
    assert to_trade_date("2023-12-31") == "12/31/2023"
    assert to_trade_date("1/2/2023") == "1/2/2023"


@pytest.mark.asyncio
async def test_migrate_date_format_rewrites_seeded_dates(stocks_service):
    await stocks_service.create(make_stock("AAPL", "$1.00", [("2023-01-02", "$1.00"), ("1/3/2023", "$1.10")]))

    migrated = await stocks_service.migrate_date_format()

    aapl = await stocks_service.find_one("AAPL")
    assert migrated == 1
    assert [entry.date for entry in aapl.historical_data] == ["1/2/2023", "1/3/2023"]
    assert await stocks_service.migrate_date_format() == 0
