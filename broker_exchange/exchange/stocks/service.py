"""
Stock Catalog Service
CRUD over the 'stocks' document, keyed by symbol
"""

import logging
import random
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from ...utils.config import Config
from ..errors import ConflictError, NotFoundError
from ..storage import JsonStorage
from .models import Stock, StockPatch
from .seed import build_seed_document, migrate_historical_dates

logger = logging.getLogger(__name__)


class StocksService:
    """Stock reference data with historical prices"""

    def __init__(self, storage: JsonStorage, storage_key: str = Config.STOCKS_KEY):
        self.storage = storage
        self.storage_key = storage_key

    async def initialize(self, today: Optional[date] = None, rng: Optional[random.Random] = None) -> bool:
        """Seed the catalog when it is empty; returns True if seeded"""
        existing = await self._load_document()
        if existing:
            return False

        await self.storage.save(self.storage_key, build_seed_document(today=today, rng=rng))
        logger.info(f"Seeded stock catalog with {len(Config.SEED_STOCKS)} stocks")
        return True

    async def _load_document(self) -> Dict[str, Dict[str, Any]]:
        document = await self.storage.load(self.storage_key)
        return document or {}

    async def load_seed_document(self) -> Optional[Dict[str, Dict[str, Any]]]:
        """Raw catalog document, bypassing the model layer"""
        return await self.storage.load(self.storage_key)

    async def create(self, stock: Stock) -> Stock:
        stocks = await self._load_document()

        if stock.symbol in stocks:
            raise ConflictError(f"Stock with symbol {stock.symbol} already exists")

        stocks[stock.symbol] = stock.to_dict()
        await self.storage.save(self.storage_key, stocks)
        logger.info(f"Created stock {stock.symbol}")
        return stock

    async def find_all(self) -> List[Stock]:
        stocks = await self._load_document()
        return [Stock.from_dict(data, symbol) for symbol, data in stocks.items()]

    async def find_one(self, symbol: str) -> Stock:
        stocks = await self._load_document()
        if symbol not in stocks:
            raise NotFoundError(f"Stock with symbol {symbol} not found")
        return Stock.from_dict(stocks[symbol], symbol)

    async def update(self, symbol: str, patch: StockPatch) -> Stock:
        stocks = await self._load_document()
        if symbol not in stocks:
            raise NotFoundError(f"Stock with symbol {symbol} not found")

        stock = patch.apply(Stock.from_dict(stocks[symbol], symbol))
        stocks[symbol] = stock.to_dict()
        await self.storage.save(self.storage_key, stocks)
        return stock

    async def update_trading_status(self, symbol: str, is_active: bool) -> Stock:
        """Flip only the participation flag"""
        return await self.update(symbol, StockPatch(is_active=is_active))

    async def remove(self, symbol: str):
        stocks = await self._load_document()
        if symbol not in stocks:
            raise NotFoundError(f"Stock with symbol {symbol} not found")

        del stocks[symbol]
        await self.storage.save(self.storage_key, stocks)
        logger.info(f"Removed stock {symbol}")

    async def save_all(self, stocks: Iterable[Stock]):
        """Replace the whole catalog in one write"""
        await self.storage.save(self.storage_key, {stock.symbol: stock.to_dict() for stock in stocks})

    async def migrate_date_format(self) -> int:
        """Convert seeded YYYY-MM-DD history dates to M/D/YYYY"""
        stocks = await self._load_document()
        migrated = migrate_historical_dates(stocks)
        if migrated:
            await self.storage.save(self.storage_key, stocks)
        logger.info(f"Migrated {migrated} historical entries to M/D/YYYY")
        return migrated
