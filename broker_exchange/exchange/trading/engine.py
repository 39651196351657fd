"""
Trading Simulation Engine
Time-accelerated clock that walks the catalog through simulated calendar days.

Each tick advances the simulated date by one day, replays the historical open
for that date when one exists or synthesizes a +/-5% move otherwise, persists
every active stock and publishes a TradingStatus. The timer is a single-shot
call_later that is re-armed only after the previous tick finished, so at most
one scheduled tick is in flight per engine.
"""

import asyncio
import copy
import logging
import random
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set

from ...utils.config import Config
from ..errors import ResetError
from ..stocks import HistoricalPrice, Stock, StockPatch, StocksService, format_price, synthesize_price
from ..storage import JsonStorage
from .broadcast import StatusBroadcaster
from .calendar import format_instant, format_trade_date, next_day, parse_instant
from .models import EngineState, SettingsUpdate, StockPrice, TradingSettings, TradingStatus

logger = logging.getLogger(__name__)


class TradingEngine:
    """Owns the running/stopped state machine, the tick timer and the price resolution"""

    def __init__(self,
                 storage: JsonStorage,
                 stocks_service: StocksService,
                 broadcaster: Optional[StatusBroadcaster] = None,
                 rng: Optional[random.Random] = None,
                 now: Optional[Callable[[], datetime]] = None):
        self.storage = storage
        self.stocks_service = stocks_service
        self.broadcaster = broadcaster or StatusBroadcaster()
        self.rng = rng or random.Random()
        self._now = now or (lambda: datetime.now(timezone.utc))

        self.settings: Optional[TradingSettings] = None
        self.last_status: Optional[TradingStatus] = None

        # Timer state
        self._timer_handle: Optional[asyncio.TimerHandle] = None
        self._timer_generation = 0
        self._period_seconds: Optional[float] = None
        self._pending_ticks: Set[asyncio.Task] = set()

        self._backup_taken = False

    # ==================== State ====================

    @property
    def state(self) -> EngineState:
        return EngineState.RUNNING if self._period_seconds is not None else EngineState.STOPPED

    @property
    def is_running(self) -> bool:
        return self.state == EngineState.RUNNING

    @property
    def timer_period_ms(self) -> Optional[float]:
        """Period of the armed timer, None while stopped"""
        if self._period_seconds is None:
            return None
        return self._period_seconds * 1000

    # ==================== Settings ====================

    async def initialize(self):
        """Load persisted settings, creating defaults if absent, and resume if they say active.

        A store failure while loading is fatal and propagates to the caller.
        """
        try:
            data = await self.storage.load(Config.SETTINGS_KEY)
        except Exception as e:
            logger.error(f"Failed to load trading settings: {e}")
            raise

        if data:
            self.settings = TradingSettings.from_dict(data)
            logger.info(f"Loaded trading settings: {self.settings.to_dict()}")

            if self.settings.is_active:
                logger.info("Trading was active at shutdown, resuming")
                try:
                    await self._start(resume=True)
                except Exception as e:
                    logger.error(f"Failed to resume trading: {e}")
                    if not self.is_running:
                        await self.stop_trading()
        else:
            self.settings = TradingSettings(
                start_date=format_instant(self._now()),
                speed_factor=Config.DEFAULT_SPEED_FACTOR,
                is_active=False,
            )
            await self._save_settings()
            logger.info("Created default trading settings")

    async def _save_settings(self):
        await self.storage.save(Config.SETTINGS_KEY, self.settings.to_dict())

    def get_settings(self) -> TradingSettings:
        return self.settings

    async def update_settings(self, update: SettingsUpdate) -> TradingSettings:
        was_active = self.settings.is_active

        self.settings = TradingSettings(
            start_date=format_instant(parse_instant(update.start_date)),
            speed_factor=update.speed_factor,
            is_active=self.settings.is_active if update.is_active is None else update.is_active,
            current_date=self.settings.current_date,
        )
        await self._save_settings()

        if was_active and not self.settings.is_active:
            await self.stop_trading()
        elif not was_active and self.settings.is_active:
            try:
                await self.start_trading()
            except Exception as e:
                logger.error(f"Trading started from settings update but first tick failed: {e}")

        return self.settings

    # ==================== Start / Stop ====================

    async def start_trading(self) -> TradingStatus:
        """Start (or restart) from the configured start date"""
        return await self._start(resume=False)

    async def _start(self, resume: bool) -> TradingStatus:
        self._cancel_timer()
        await self._drain_pending_ticks()

        if not self._backup_taken:
            await self._save_original_stocks()
            self._backup_taken = True

        self.settings.is_active = True
        if not resume or self.settings.current_date is None:
            self.settings.current_date = self.settings.start_date
        await self._save_settings()

        self._timer_generation += 1
        generation = self._timer_generation
        self._period_seconds = float(self.settings.speed_factor)
        logger.info(f"Trading started: {self.timer_period_ms:.0f} ms per simulated day "
                    f"from {self.settings.current_date}")

        # First tick runs immediately; the timer is armed once it finishes
        try:
            return await self.simulate_tick()
        finally:
            self._arm_timer(generation)

    async def stop_trading(self):
        """Cancel the timer and persist isActive=false; persistence errors are only logged"""
        self._cancel_timer()
        self.settings.is_active = False
        try:
            await self._save_settings()
        except Exception as e:
            logger.error(f"Failed to save trading settings: {e}")
        logger.info("Trading stopped")

    async def shutdown(self):
        """Drop the timer without touching persisted settings so the next boot resumes"""
        self._cancel_timer()
        for task in list(self._pending_ticks):
            task.cancel()

    def discard_backup(self):
        """Next start takes a fresh baseline"""
        self._backup_taken = False

    # ==================== Timer ====================

    def _cancel_timer(self):
        # Bumping the generation invalidates re-arming from any tick still in flight
        self._timer_generation += 1
        self._period_seconds = None
        if self._timer_handle is not None:
            self._timer_handle.cancel()
            self._timer_handle = None

    def _arm_timer(self, generation: int):
        if generation != self._timer_generation or self._period_seconds is None:
            return
        loop = asyncio.get_running_loop()
        self._timer_handle = loop.call_later(self._period_seconds, self._on_timer, generation)

    def _on_timer(self, generation: int):
        self._timer_handle = None
        if generation != self._timer_generation:
            return
        task = asyncio.ensure_future(self._run_scheduled_tick(generation))
        self._pending_ticks.add(task)
        task.add_done_callback(self._pending_ticks.discard)

    async def _drain_pending_ticks(self):
        # A tick already in flight completes and publishes before state is rewritten
        if self._pending_ticks:
            await asyncio.gather(*list(self._pending_ticks), return_exceptions=True)

    async def _run_scheduled_tick(self, generation: int):
        try:
            await self.simulate_tick()
        except Exception as e:
            logger.warning(f"Scheduled tick failed, simulation continues: {e}")
        finally:
            self._arm_timer(generation)

    # ==================== Tick ====================

    async def simulate_tick(self) -> TradingStatus:
        """Advance one simulated day, resolve prices, persist and publish"""
        try:
            previous = parse_instant(self.settings.current_date or self.settings.start_date)
            current = next_day(previous)
            self.settings.current_date = format_instant(current)
            await self._save_settings()

            stocks = await self.stocks_service.find_all()
            active_stocks = [stock for stock in stocks if stock.is_active]

            updated = await self._update_stock_prices(active_stocks, current.date())

            status = TradingStatus(
                is_active=True,
                current_date=format_trade_date(current),
                stock_prices=[StockPrice(stock.symbol, stock.current_price) for stock in updated],
            )
            self.last_status = status
            self.broadcaster.publish(status)
            return status

        except Exception as e:
            logger.error(f"Error during trading simulation: {e}")
            raise

    async def _update_stock_prices(self, stocks: List[Stock], trade_date: date) -> List[Stock]:
        date_key = format_trade_date(trade_date)
        updated = []

        for stock in stocks:
            self.resolve_price(stock, date_key)
            await self.stocks_service.update(stock.symbol, StockPatch(
                current_price=stock.current_price,
                historical_data=stock.historical_data,
            ))
            updated.append(stock)

        return updated

    def resolve_price(self, stock: Stock, date_key: str) -> bool:
        """Set the stock's price for date_key; True if a new history entry was synthesized"""
        historical = stock.find_historical_price(date_key)
        if historical:
            stock.update_current_price(historical.open)
            logger.debug(f"{stock.symbol} replayed {historical.open} on {date_key}")
            return False

        new_price = format_price(synthesize_price(stock.get_current_price(), self.rng))
        stock.update_current_price(new_price)
        stock.add_historical_data(HistoricalPrice(date=date_key, open=new_price))
        logger.debug(f"{stock.symbol} synthesized {new_price} on {date_key}")
        return True

    # ==================== Backup / Reset ====================

    async def _save_original_stocks(self):
        logger.info("Saving baseline copy of stock data...")
        try:
            stocks = await self.stocks_service.find_all()
            backup = {stock.symbol: copy.deepcopy(stock.to_dict()) for stock in stocks}
            await self.storage.save(Config.BACKUP_KEY, backup)
        except Exception as e:
            logger.error(f"Failed to save baseline stock data: {e}")
            raise
        logger.info(f"Baseline saved for {len(backup)} stocks")

    async def _load_baseline(self) -> Dict[str, Dict[str, Any]]:
        baseline = await self.storage.load(Config.BACKUP_KEY)
        if baseline:
            logger.info("Restoring from baseline backup")
        else:
            logger.warning("Baseline backup not found, falling back to catalog seed document")
            baseline = await self.stocks_service.load_seed_document()
            if not baseline:
                raise ResetError("Neither a baseline backup nor a seed document is available")

        if not isinstance(baseline, dict):
            raise ResetError("Baseline document is malformed")
        for symbol, entry in baseline.items():
            if (not isinstance(entry, dict)
                    or not isinstance(entry.get('currentPrice'), str)
                    or not isinstance(entry.get('historicalData'), list)):
                raise ResetError(f"Baseline entry for {symbol} is malformed")
            for item in entry['historicalData']:
                if not isinstance(item, dict) or 'date' not in item or 'open' not in item:
                    raise ResetError(f"Baseline history for {symbol} is malformed")
        return baseline

    async def reset_simulation(self) -> TradingStatus:
        """Stop, restore prices and history from the baseline, rewind to the start date"""
        if self.is_running or self.settings.is_active:
            await self.stop_trading()
        await self._drain_pending_ticks()

        try:
            logger.info("Resetting simulation data...")
            stocks = await self.stocks_service.find_all()
            baseline = await self._load_baseline()

            for stock in stocks:
                original = baseline.get(stock.symbol)
                if original:
                    stock.update_current_price(original['currentPrice'])
                    stock.historical_data = [HistoricalPrice.from_dict(entry) for entry in original['historicalData']]
                    stock.company_name = original.get('companyName', stock.company_name)
                    logger.info(f"Restored baseline for {stock.symbol}")
                else:
                    logger.warning(f"No baseline entry for {stock.symbol}, clearing its history")
                    stock.historical_data = []

            await self.stocks_service.save_all(stocks)

            self.settings.current_date = self.settings.start_date
            await self._save_settings()

            status = TradingStatus(
                is_active=False,
                current_date=format_trade_date(parse_instant(self.settings.start_date)),
                stock_prices=[StockPrice(stock.symbol, stock.current_price) for stock in stocks],
            )
            self.last_status = status
            self.broadcaster.publish(status)

            logger.info("Simulation reset complete")
            return status

        except Exception as e:
            logger.error(f"Failed to reset simulation: {e}")
            raise
