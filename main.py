#!/usr/bin/env python3
"""Main entry point for the Broker Exchange API server."""

import uvicorn

from broker_exchange.utils.config import Config
from broker_exchange.utils.logger import setup_logger

logger = setup_logger('broker_exchange')

if __name__ == "__main__":
    logger.info(f"Starting Broker Exchange API on {Config.HOST}:{Config.PORT}")
    uvicorn.run(
        "broker_exchange.exchange.api.gateway:app",
        host=Config.HOST,
        port=Config.PORT,
        log_level=Config.LOG_LEVEL.lower(),
    )
