"""Chats the current user belongs to, kept in step with the backend."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from .backend import ALL_EVENTS, CHATS, Backend, ChangeEvent
from .display import build_chat_list
from .logging_config import configure_logging
from .models import ChatViewModel
from .store_base import ReloadingStore
from .subscriptions import SubscriptionManager
from ..shared.dto import Chat
from ..shared.errors import NetworkError, SubscriptionError

logger = configure_logging(__name__)


def order_chats(chats: List[Chat]) -> List[Chat]:
    """One entry per chat id, most recently updated first."""
    unique: Dict[str, Chat] = {}
    for chat in chats:
        unique.setdefault(chat.id, chat)
    return sorted(unique.values(), key=lambda c: c.updated_at, reverse=True)


class ChatListStore(ReloadingStore):
    slot = "chat-list"

    def __init__(self, backend: Backend, subscriptions: Optional[SubscriptionManager] = None):
        super().__init__(backend, subscriptions)
        self.user_id: Optional[str] = None
        self.chats: List[Chat] = []

    async def load_for_user(self, user_id: Optional[str]) -> bool:
        """Replace the held list with the user's chats. Returns False if nothing was applied."""
        generation = self._begin()
        if not user_id:
            self.user_id = user_id
            self.chats = []
            self._record_success()
            self._finish(generation)
            return True
        try:
            memberships = await self.backend.query_memberships(user_id)
            chat_ids = list(dict.fromkeys(m.chat_id for m in memberships))
            chats = await self.backend.query_chats(chat_ids) if chat_ids else []
        except NetworkError as exc:
            self._record_failure(generation, exc)
            logger.warning("CHAT_LIST_LOAD_FAIL user_id=%s error=%s", user_id, exc)
            return False
        finally:
            self._finish(generation)
        if not self._is_current(generation):
            logger.info("CHAT_LIST_RESULT_DISCARDED user_id=%s generation=%s", user_id, generation)
            return False
        self.user_id = user_id
        self._apply(chats)
        logger.info("CHAT_LIST_LOADED user_id=%s count=%s", user_id, len(self.chats))
        return True

    def _apply(self, chats: List[Chat]) -> None:
        self.chats = order_chats(chats)
        self._record_success()
        for chat in self.chats:
            for member in chat.members:
                if member.user is None:
                    logger.warning("DANGLING_MEMBER chat_id=%s user_id=%s", chat.id, member.user_id)

    async def refresh(self) -> bool:
        return await self.load_for_user(self.user_id)

    def subscribe_to_updates(self, user_id: Optional[str]) -> bool:
        if not user_id:
            self.unsubscribe()
            return False

        def on_change(event: ChangeEvent) -> None:
            logger.info("CHAT_CHANGE type=%s id=%s", event.type, event.record.get("id"))
            self._schedule(self.load_for_user(user_id))

        try:
            self.subscriptions.open(self.slot, CHATS, on_change, event_types=ALL_EVENTS)
        except SubscriptionError as exc:
            self.subscription_error = exc
            logger.error("CHAT_LIST_SUBSCRIBE_FAIL user_id=%s error=%s", user_id, exc)
            return False
        return True

    def chat_list(self, now: Optional[datetime] = None) -> List[ChatViewModel]:
        return build_chat_list(self.chats, self.user_id, now)

    def find(self, chat_id: Optional[str]) -> Optional[Chat]:
        return next((c for c in self.chats if c.id == chat_id), None)
