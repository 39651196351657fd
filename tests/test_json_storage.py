"""Tests for the JSON document store."""

import json
import os

import pytest

from broker_exchange.exchange.errors import StorageError


@pytest.mark.asyncio
async def test_save_then_load_round_trip(storage):
    document = {"AAPL": {"symbol": "AAPL", "historicalData": [{"date": "1/2/2023", "open": "$150.00"}]}}
    await storage.save("stocks", document)
    assert await storage.load("stocks") == document


@pytest.mark.asyncio
async def test_load_missing_key_returns_none(storage):
    assert await storage.load("never-saved") is None


@pytest.mark.asyncio
async def test_save_overwrites_whole_document(storage):
    await storage.save("trading-settings", {"speedFactor": 1, "isActive": True})
    await storage.save("trading-settings", {"speedFactor": 2})
    assert await storage.load("trading-settings") == {"speedFactor": 2}


@pytest.mark.asyncio
async def test_append_creates_and_extends_array(storage):
    await storage.append("brokers", {"id": "1"})
    await storage.append("brokers", {"id": "2"})
    assert await storage.load("brokers") == [{"id": "1"}, {"id": "2"}]


@pytest.mark.asyncio
async def test_append_replaces_non_array_document(storage):
    await storage.save("brokers", {"not": "a list"})
    await storage.append("brokers", {"id": "1"})
    assert await storage.load("brokers") == [{"id": "1"}]


@pytest.mark.asyncio
async def test_corrupt_document_raises_storage_error(storage):
    with open(os.path.join(storage.storage_path, "stocks.json"), "w") as fh:
        fh.write("{not json")

    with pytest.raises(StorageError):
        await storage.load("stocks")


@pytest.mark.asyncio
async def test_unserializable_document_raises_storage_error(storage):
    with pytest.raises(StorageError):
        await storage.save("stocks", {"bad": object()})
    assert await storage.load("stocks") is None


@pytest.mark.asyncio
async def test_documents_are_pretty_printed(storage):
    await storage.save("trading-settings", {"isActive": False})
    with open(os.path.join(storage.storage_path, "trading-settings.json")) as fh:
        raw = fh.read()
    assert raw == json.dumps({"isActive": False}, indent=2)


@pytest.mark.asyncio
async def test_path_like_keys_are_rejected(storage):
    with pytest.raises(ValueError):
        await storage.load("../outside")
