"""
API Gateway for the broker exchange.
Provides REST endpoints for stocks, brokers and the trading clock, plus a
WebSocket that streams trading status updates.
"""

import json
import logging
import os
import random
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional, Set

import psutil
from fastapi import APIRouter, FastAPI, Request, Response, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ... import __version__
from ...utils.config import Config
from ..brokers import BrokerPatch, BrokersService
from ..errors import ConflictError, ExchangeError, NotFoundError
from ..stocks import HistoricalPrice, Stock, StockPatch, StocksService
from ..storage import JsonStorage
from ..trading import SettingsUpdate, StatusBroadcaster, TradingEngine, TradingStatus
from ..trading.calendar import format_instant
from .schemas import (
    CreateBrokerRequest,
    CreateStockRequest,
    TradingSettingsRequest,
    UpdateBrokerRequest,
    UpdateStockRequest,
)

logger = logging.getLogger(__name__)


def get_memory_usage():
    """Get current memory usage in MB"""
    process = psutil.Process(os.getpid())
    return process.memory_info().rss / 1024 / 1024


# WebSocket for real-time data
class ConnectionManager:
    """Manage WebSocket connections."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket):
        """Accept new connection."""
        await websocket.accept()
        self.active_connections.add(websocket)

    def disconnect(self, websocket: WebSocket):
        """Remove connection."""
        self.active_connections.discard(websocket)

    async def send_event(self, websocket: WebSocket, event: str, data: dict):
        await websocket.send_text(json.dumps({"event": event, "data": data}))

    async def broadcast(self, event: str, data: dict):
        """Send to every open connection, dropping the ones that fail."""
        for websocket in list(self.active_connections):
            try:
                await self.send_event(websocket, event, data)
            except Exception as e:
                logger.warning(f"Dropping WebSocket connection: {e}")
                self.disconnect(websocket)

    async def broadcast_status(self, status: TradingStatus):
        await self.broadcast("tradingStatus", status.to_dict())


class ExchangeContext:
    """Services shared by the routes, built during application startup."""

    def __init__(self):
        self.storage: Optional[JsonStorage] = None
        self.stocks: Optional[StocksService] = None
        self.brokers: Optional[BrokersService] = None
        self.broadcaster: Optional[StatusBroadcaster] = None
        self.engine: Optional[TradingEngine] = None
        self.manager = ConnectionManager()


def create_app(storage_dir: Optional[str] = None, rng: Optional[random.Random] = None) -> FastAPI:
    ctx = ExchangeContext()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx.storage = JsonStorage(storage_dir or Config.STORAGE_DIR)
        ctx.stocks = StocksService(ctx.storage)
        ctx.brokers = BrokersService(ctx.storage)
        ctx.broadcaster = StatusBroadcaster()
        ctx.engine = TradingEngine(ctx.storage, ctx.stocks, ctx.broadcaster, rng=rng)

        unsubscribe = ctx.broadcaster.subscribe(ctx.manager.broadcast_status)
        await ctx.stocks.initialize()
        await ctx.engine.initialize()
        logger.info("Exchange API started")

        try:
            yield
        finally:
            unsubscribe()
            await ctx.engine.shutdown()
            logger.info("Exchange API stopped")

    app = FastAPI(title="Broker Exchange API", version=__version__, lifespan=lifespan)
    app.state.exchange = ctx

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ExchangeError)
    async def exchange_error_handler(request: Request, exc: ExchangeError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    router = APIRouter(prefix=Config.API_PREFIX)

    @router.get("/")
    async def root():
        """API root endpoint."""
        return {
            "name": "Broker Exchange API",
            "version": __version__,
            "endpoints": {
                "stocks": f"{Config.API_PREFIX}/stocks",
                "brokers": f"{Config.API_PREFIX}/brokers",
                "trading": f"{Config.API_PREFIX}/trading",
                "websocket": f"{Config.API_PREFIX}/ws",
            },
        }

    @router.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "memory_mb": round(get_memory_usage(), 2),
            "components": {
                "trading_engine": ctx.engine.state.value,
                "websocket_clients": len(ctx.manager.active_connections),
            },
        }

    # ==================== Stocks ====================

    @router.post("/stocks", status_code=201)
    async def create_stock(request: CreateStockRequest):
        stock = Stock(
            symbol=request.symbol,
            company_name=request.company_name,
            is_active=request.is_active,
            current_price=request.current_price,
            historical_data=[HistoricalPrice(item.date, item.open) for item in request.historical_data],
        )
        created = await ctx.stocks.create(stock)
        return created.to_dict()

    @router.get("/stocks")
    async def list_stocks():
        return [stock.to_dict() for stock in await ctx.stocks.find_all()]

    @router.get("/stocks/{symbol}")
    async def get_stock(symbol: str):
        stock = await ctx.stocks.find_one(symbol)
        return stock.to_dict()

    @router.patch("/stocks/{symbol}")
    async def update_stock(symbol: str, request: UpdateStockRequest):
        patch = StockPatch(
            company_name=request.company_name,
            is_active=request.is_active,
            current_price=request.current_price,
            historical_data=None if request.historical_data is None else [
                HistoricalPrice(item.date, item.open) for item in request.historical_data
            ],
        )
        stock = await ctx.stocks.update(symbol, patch)
        return stock.to_dict()

    @router.delete("/stocks/{symbol}", status_code=204)
    async def delete_stock(symbol: str):
        await ctx.stocks.remove(symbol)
        return Response(status_code=204)

    # ==================== Brokers ====================

    @router.post("/brokers", status_code=201)
    async def create_broker(request: CreateBrokerRequest):
        broker = await ctx.brokers.create(request.name, request.balance)
        return broker.to_dict()

    @router.get("/brokers")
    async def list_brokers():
        return [broker.to_dict() for broker in await ctx.brokers.find_all()]

    @router.get("/brokers/{broker_id}")
    async def get_broker(broker_id: str):
        broker = await ctx.brokers.find_one(broker_id)
        return broker.to_dict()

    @router.patch("/brokers/{broker_id}")
    async def update_broker(broker_id: str, request: UpdateBrokerRequest):
        broker = await ctx.brokers.update(broker_id, BrokerPatch(name=request.name, balance=request.balance))
        return broker.to_dict()

    @router.delete("/brokers/{broker_id}", status_code=204)
    async def delete_broker(broker_id: str):
        await ctx.brokers.remove(broker_id)
        return Response(status_code=204)

    # ==================== Trading ====================

    @router.get("/trading/settings")
    async def get_trading_settings():
        return ctx.engine.get_settings().to_dict()

    @router.patch("/trading/settings")
    async def update_trading_settings(request: TradingSettingsRequest):
        settings = await ctx.engine.update_settings(SettingsUpdate(
            start_date=format_instant(request.start_date),
            speed_factor=request.speed_factor,
            is_active=request.is_active,
        ))
        return settings.to_dict()

    @router.post("/trading/start")
    async def start_trading():
        status = await ctx.engine.start_trading()
        return status.to_dict()

    @router.post("/trading/stop", status_code=204)
    async def stop_trading():
        await ctx.engine.stop_trading()
        return Response(status_code=204)

    @router.post("/trading/reset")
    async def reset_simulation():
        status = await ctx.engine.reset_simulation()
        return status.to_dict()

    @router.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """WebSocket endpoint for trading status updates."""
        await ctx.manager.connect(websocket)
        logger.info("WebSocket client connected")

        try:
            await ctx.manager.send_event(websocket, "tradingSettings", ctx.engine.get_settings().to_dict())

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except ValueError:
                    await ctx.manager.send_event(websocket, "error", {"message": "Invalid JSON"})
                    continue

                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_text(json.dumps({
                        "type": "pong",
                        "timestamp": datetime.now(timezone.utc).isoformat(),
                    }))

        except WebSocketDisconnect:
            logger.info("WebSocket client disconnected")
        finally:
            ctx.manager.disconnect(websocket)

    app.include_router(router)
    return app


app = create_app()
