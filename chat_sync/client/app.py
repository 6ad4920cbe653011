"""Controller exposing chat list and feed state to a presentation layer."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from .api import APIClient
from .backend import Backend
from .chat_list import ChatListStore
from .display import CHAT_TYPE_FILTERS, build_chat_view, filter_chats
from .logging_config import configure_logging
from .message_feed import MessageFeedStore
from .models import ChatViewModel, MessageGroup
from .remote import RemoteBackend
from .storage import get_api_key, get_server_url, get_user, store_server

logger = configure_logging(__name__)


class ChatController:
    """Wires the two stores together and turns user intents into reloads."""

    def __init__(
        self,
        backend: Optional[Backend] = None,
        user: Optional[Dict[str, Any]] = None,
        base_url: Optional[str] = None,
    ):
        self.base_url = base_url or get_server_url() or ""
        self.user = user if user is not None else get_user()
        self.search = ""
        self.chat_type = "all"
        self.selected_chat_id: Optional[str] = None
        self.backend: Optional[Backend] = None
        self.chat_store: Optional[ChatListStore] = None
        self.feed_store: Optional[MessageFeedStore] = None
        if backend is not None:
            self._bind(backend)
        elif self.base_url:
            self._bind(RemoteBackend(APIClient(self.base_url, get_api_key())))

    def _bind(self, backend: Backend) -> None:
        self.backend = backend
        self.chat_store = ChatListStore(backend)
        self.feed_store = MessageFeedStore(backend, current_user_id=self.user_id)

    def set_base_url(self, url: str, api_key: str = "") -> None:
        if self.backend is not None:
            raise RuntimeError("Backend already bound; close the controller first")
        self.base_url = url.rstrip("/")
        store_server(self.base_url, api_key)
        self._bind(RemoteBackend(APIClient(self.base_url, api_key)))

    def ensure_ready(self) -> None:
        if self.backend is None:
            raise RuntimeError("Server URL not configured")

    @property
    def user_id(self) -> Optional[str]:
        if not self.user:
            return None
        return str(self.user["id"]) if self.user.get("id") is not None else None

    async def start(self) -> bool:
        """Subscribe to chat changes and load the initial list."""
        self.ensure_ready()
        self.chat_store.subscribe_to_updates(self.user_id)
        loaded = await self.chat_store.load_for_user(self.user_id)
        logger.info("CONTROLLER_STARTED user_id=%s chats=%s", self.user_id, len(self.chat_store.chats))
        return loaded

    @property
    def chat_list(self) -> List[ChatViewModel]:
        if self.chat_store is None:
            return []
        return filter_chats(self.chat_store.chat_list(), self.search, self.chat_type)

    @property
    def active_feed(self) -> List[MessageGroup]:
        if self.feed_store is None:
            return []
        return self.feed_store.groups()

    def selected_chat(self, now: Optional[datetime] = None) -> Optional[ChatViewModel]:
        chat = self.chat_store.find(self.selected_chat_id) if self.chat_store else None
        if chat is None:
            return None
        return build_chat_view(chat, self.user_id, now)

    @property
    def is_stale(self) -> bool:
        return any(store is not None and store.stale for store in (self.chat_store, self.feed_store))

    def set_filter(self, search: Optional[str] = None, chat_type: Optional[str] = None) -> None:
        if search is not None:
            self.search = search
        if chat_type is not None:
            if chat_type not in CHAT_TYPE_FILTERS:
                raise ValueError(f"Unknown chat type filter: {chat_type}")
            self.chat_type = chat_type

    async def select_chat(self, chat_id: Optional[str]) -> bool:
        self.ensure_ready()
        self.selected_chat_id = chat_id
        logger.info("CHAT_SELECTED chat_id=%s", chat_id)
        return await self.feed_store.select(chat_id)

    async def refresh_chat_list(self) -> bool:
        self.ensure_ready()
        return await self.chat_store.load_for_user(self.user_id)

    async def refresh_active_feed(self) -> bool:
        self.ensure_ready()
        return await self.feed_store.refresh()

    async def close(self) -> None:
        for store in (self.feed_store, self.chat_store):
            if store is not None:
                await store.dispose()
        self.backend = None
        self.chat_store = None
        self.feed_store = None
        self.selected_chat_id = None


__all__ = ["ChatController"]
