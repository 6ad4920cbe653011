"""Backend implementation backed by the REST row API."""
from __future__ import annotations

import asyncio
from typing import Dict, FrozenSet, List, Optional

from . import config
from .api import APIClient
from .backend import (
    ALL_EVENTS,
    CHAT_MEMBERS,
    CHATS,
    MESSAGES,
    Backend,
    Callback,
    ChannelHandle,
    Filter,
)
from .logging_config import configure_logging
from .realtime import PollingChannel
from .schemas import parse_chats, parse_memberships, parse_messages
from ..shared.dto import Chat, Membership, Message
from ..shared.errors import SubscriptionError

logger = configure_logging(__name__)


class RemoteBackend(Backend):
    """Backend served by a REST row API, with change notification by polling."""

    STAMP_COLUMNS = {CHATS: "updated_at", MESSAGES: "created_at", CHAT_MEMBERS: "chat_id"}

    def __init__(self, api: APIClient, poll_interval: float = config.POLL_INTERVAL_SECONDS):
        self.api = api
        self.poll_interval = poll_interval
        self._channels: Dict[int, PollingChannel] = {}

    async def query_memberships(self, user_id: str) -> List[Membership]:
        rows = await asyncio.to_thread(self.api.list_memberships, user_id)
        return parse_memberships(rows)

    async def query_chats(self, chat_ids: List[str]) -> List[Chat]:
        if not chat_ids:
            return []
        rows = await asyncio.to_thread(self.api.list_chats, chat_ids)
        return parse_chats(rows)

    async def query_messages(self, chat_id: str) -> List[Message]:
        rows = await asyncio.to_thread(self.api.list_messages, chat_id)
        return parse_messages(rows)

    def subscribe(
        self,
        resource: str,
        filter: Optional[Filter] = None,
        event_types: FrozenSet[str] = ALL_EVENTS,
        callback: Callback | None = None,
    ) -> ChannelHandle:
        stamp_column = self.STAMP_COLUMNS.get(resource)
        if stamp_column is None:
            raise SubscriptionError(f"No change feed for resource {resource!r}")
        if callback is None:
            raise SubscriptionError("A callback is required to subscribe")
        handle = ChannelHandle(resource=resource, filter=filter, event_types=frozenset(event_types))
        channel = PollingChannel(self.api, handle, callback, stamp_column, self.poll_interval)
        try:
            channel.start()
        except RuntimeError as exc:
            raise SubscriptionError(f"Cannot open channel on {resource}: {exc}") from exc
        self._channels[handle.id] = channel
        logger.info("CHANNEL_OPEN resource=%s handle=%s filter=%s", resource, handle.id, filter)
        return handle

    def unsubscribe(self, handle: ChannelHandle) -> None:
        handle.active = False
        channel = self._channels.pop(handle.id, None)
        if channel is None:
            return
        channel.stop()
        logger.info("CHANNEL_CLOSED resource=%s handle=%s", handle.resource, handle.id)
