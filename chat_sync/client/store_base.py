"""Shared reload bookkeeping for the chat list and message feed stores."""
from __future__ import annotations

import asyncio
from typing import Coroutine, Optional, Set

from .backend import Backend
from .logging_config import configure_logging
from .subscriptions import SubscriptionManager
from ..shared.errors import ChatSyncError, SubscriptionError

logger = configure_logging(__name__)


class ReloadingStore:
    """Holds one snapshot that is only ever replaced through a guarded reload.

    Each reload takes a generation number when it starts. A result is applied
    only if no other reload (or scope change) has started since, so the most
    recently initiated request wins regardless of completion order.
    """

    slot = "store"

    def __init__(self, backend: Backend, subscriptions: Optional[SubscriptionManager] = None):
        self.backend = backend
        self.subscriptions = subscriptions or SubscriptionManager(backend)
        self.last_error: Optional[ChatSyncError] = None
        self.subscription_error: Optional[SubscriptionError] = None
        self.stale = False
        self.is_loading = False
        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()

    def _begin(self) -> int:
        self._generation += 1
        self.is_loading = True
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _finish(self, generation: int) -> None:
        if self._is_current(generation):
            self.is_loading = False

    def _record_failure(self, generation: int, exc: ChatSyncError) -> None:
        if self._is_current(generation):
            self.last_error = exc
            self.stale = True

    def _record_success(self) -> None:
        self.last_error = None
        self.stale = False

    def _invalidate(self) -> None:
        """Drop any in-flight result and pending event-driven reload."""
        self._generation += 1
        self.is_loading = False
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    def _schedule(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def unsubscribe(self) -> None:
        """Release this store's channel. Safe to call any number of times."""
        try:
            self.subscriptions.release(self.slot)
        except SubscriptionError as exc:
            self.subscription_error = exc
            logger.warning("UNSUBSCRIBE_FAIL slot=%s error=%s", self.slot, exc)

    async def dispose(self) -> None:
        self.unsubscribe()
        pending = list(self._tasks)
        self._invalidate()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
