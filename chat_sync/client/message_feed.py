"""Message feed of the one open chat."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from .backend import INSERT, MESSAGES, Backend, ChangeEvent, Filter
from .grouping import group_by_date
from .logging_config import configure_logging
from .models import MessageGroup
from .store_base import ReloadingStore
from .subscriptions import SubscriptionManager
from ..shared.dto import Message
from ..shared.errors import NetworkError, SubscriptionError

logger = configure_logging(__name__)


def order_feed(messages: List[Message]) -> List[Message]:
    return sorted(messages, key=lambda m: (m.created_at, m.id))


class MessageFeedStore(ReloadingStore):
    """Feed for a single chat at a time.

    Every insert event on the open chat triggers a full reload rather than an
    append, so new rows always arrive with their author joined and in order.
    """

    slot = "message-feed"

    def __init__(
        self,
        backend: Backend,
        current_user_id: Optional[str] = None,
        subscriptions: Optional[SubscriptionManager] = None,
    ):
        super().__init__(backend, subscriptions)
        self.current_user_id = current_user_id
        self.chat_id: Optional[str] = None
        self.messages: List[Message] = []

    async def load(self, chat_id: Optional[str]) -> bool:
        generation = self._begin()
        scope = self.chat_id
        if chat_id is None:
            self.chat_id = None
            self.messages = []
            self._record_success()
            self._finish(generation)
            return True
        try:
            messages = await self.backend.query_messages(chat_id)
        except NetworkError as exc:
            self._record_failure(generation, exc)
            logger.warning("FEED_LOAD_FAIL chat_id=%s error=%s", chat_id, exc)
            return False
        finally:
            self._finish(generation)
        if not self._is_current(generation) or self.chat_id != scope:
            logger.info("FEED_RESULT_DISCARDED chat_id=%s generation=%s", chat_id, generation)
            return False
        self.chat_id = chat_id
        self._apply(messages)
        logger.info("FEED_LOADED chat_id=%s count=%s", chat_id, len(self.messages))
        return True

    def _apply(self, messages: List[Message]) -> None:
        self.messages = order_feed(messages)
        self._record_success()
        for message in self.messages:
            if message.user is None:
                logger.warning("UNRESOLVED_AUTHOR message_id=%s user_id=%s", message.id, message.user_id)

    async def refresh(self) -> bool:
        if self.chat_id is None:
            return False
        return await self.load(self.chat_id)

    def subscribe(self, chat_id: Optional[str]) -> bool:
        self.unsubscribe()
        if chat_id is None:
            return False

        def on_insert(event: ChangeEvent) -> None:
            if chat_id != self.chat_id:
                return
            logger.info("MESSAGE_INSERTED chat_id=%s id=%s", chat_id, event.record.get("id"))
            self._schedule(self.load(chat_id))

        try:
            self.subscriptions.open(self.slot, MESSAGES, on_insert, Filter("chat_id", chat_id), frozenset({INSERT}))
        except SubscriptionError as exc:
            self.subscription_error = exc
            logger.error("FEED_SUBSCRIBE_FAIL chat_id=%s error=%s", chat_id, exc)
            return False
        return True

    async def select(self, chat_id: Optional[str]) -> bool:
        """Bind the store to another chat, dropping everything tied to the previous one."""
        self.unsubscribe()
        self._invalidate()
        self.chat_id = chat_id
        self.messages = []
        self._record_success()
        if chat_id is None:
            return True
        self.subscribe(chat_id)
        return await self.load(chat_id)

    def groups(self, now: Optional[datetime] = None) -> List[MessageGroup]:
        return group_by_date(self.messages, self.current_user_id, now)
