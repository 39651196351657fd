"""
Trading status fan-out.
Publish is fire-and-forget to the subscribers attached at publish time; no replay.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, List, Set

from .models import TradingStatus

logger = logging.getLogger(__name__)

StatusHandler = Callable[[TradingStatus], Any]


class StatusBroadcaster:

    def __init__(self):
        self._subscribers: List[StatusHandler] = []
        self._pending: Set[asyncio.Task] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, handler: StatusHandler) -> Callable[[], None]:
        """Attach a handler; returns a callable that detaches it"""
        self._subscribers.append(handler)

        def unsubscribe():
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def publish(self, status: TradingStatus):
        for handler in list(self._subscribers):
            try:
                result = handler(status)
            except Exception as e:
                logger.error(f"Status subscriber failed: {e}")
                continue

            # Coroutine handlers run as tasks on the current loop
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._on_delivered)

    def _on_delivered(self, task: asyncio.Task):
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Status subscriber failed: {task.exception()}")
