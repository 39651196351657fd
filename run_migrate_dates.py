#!/usr/bin/env python3
"""Entry point for migrating seeded history dates from YYYY-MM-DD to M/D/YYYY."""

import argparse
import asyncio

from broker_exchange.exchange.stocks import StocksService
from broker_exchange.exchange.storage import JsonStorage
from broker_exchange.utils.config import Config
from broker_exchange.utils.logger import setup_logger

logger = setup_logger('broker_exchange')


async def migrate(storage_dir):
    service = StocksService(JsonStorage(storage_dir))
    return await service.migrate_date_format()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Rewrite stock history dates to the trading join format')
    parser.add_argument('--storage-dir', '-s', default=Config.STORAGE_DIR,
                        help=f'Storage directory (default: {Config.STORAGE_DIR})')

    args = parser.parse_args()

    migrated = asyncio.run(migrate(args.storage_dir))
    logger.info(f"Done: {migrated} entries rewritten in {args.storage_dir}")
