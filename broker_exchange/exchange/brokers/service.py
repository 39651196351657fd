"""
Broker Account Service
Brokers are stored as an array document
"""

import logging
from decimal import Decimal
from typing import List, Tuple

from ...utils.config import Config
from ..errors import NotFoundError
from ..storage import JsonStorage
from .models import Broker, BrokerPatch

logger = logging.getLogger(__name__)


class BrokersService:

    def __init__(self, storage: JsonStorage, storage_key: str = Config.BROKERS_KEY):
        self.storage = storage
        self.storage_key = storage_key

    async def create(self, name: str, balance: Decimal = Decimal('0')) -> Broker:
        broker = Broker.create(name, balance)
        await self.storage.append(self.storage_key, broker.to_dict())
        logger.info(f"Created broker {broker.id} ({name})")
        return broker

    async def find_all(self) -> List[Broker]:
        brokers = await self.storage.load(self.storage_key)
        if not isinstance(brokers, list):
            return []
        return [Broker.from_dict(data) for data in brokers]

    async def _locate(self, broker_id: str) -> Tuple[List[Broker], int]:
        brokers = await self.find_all()
        for index, broker in enumerate(brokers):
            if broker.id == broker_id:
                return brokers, index
        raise NotFoundError(f"Broker with ID {broker_id} not found")

    async def find_one(self, broker_id: str) -> Broker:
        brokers, index = await self._locate(broker_id)
        return brokers[index]

    async def update(self, broker_id: str, patch: BrokerPatch) -> Broker:
        brokers, index = await self._locate(broker_id)
        broker = patch.apply(brokers[index])
        await self.storage.save(self.storage_key, [b.to_dict() for b in brokers])
        return broker

    async def remove(self, broker_id: str):
        brokers, index = await self._locate(broker_id)
        del brokers[index]
        await self.storage.save(self.storage_key, [b.to_dict() for b in brokers])
        logger.info(f"Removed broker {broker_id}")
