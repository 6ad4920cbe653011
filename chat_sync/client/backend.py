"""Backend contract consumed by the stores: queries, channels and change events."""
from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from ..shared.dto import Chat, Membership, Message

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
ANY = "*"
ALL_EVENTS: FrozenSet[str] = frozenset({ANY})

CHATS = "chats"
MESSAGES = "messages"
CHAT_MEMBERS = "chat_members"

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class Filter:
    column: str
    value: str

    def matches(self, record: Dict[str, Any]) -> bool:
        """Records without the filtered column never match."""
        if self.column not in record:
            return False
        return str(record[self.column]) == str(self.value)


@dataclass(frozen=True)
class ChangeEvent:
    resource: str
    type: str
    record: Dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class ChannelHandle:
    resource: str
    filter: Optional[Filter] = None
    event_types: FrozenSet[str] = ALL_EVENTS
    id: int = field(default_factory=lambda: next(_handle_ids))
    active: bool = True

    def accepts(self, event: ChangeEvent) -> bool:
        if not self.active or event.resource != self.resource:
            return False
        if ANY not in self.event_types and event.type not in self.event_types:
            return False
        return self.filter is None or self.filter.matches(event.record)


Callback = Callable[[ChangeEvent], None]


class Backend(ABC):
    """Row query and change-notification primitives the stores depend on."""

    @abstractmethod
    async def query_memberships(self, user_id: str) -> List[Membership]:
        ...

    @abstractmethod
    async def query_chats(self, chat_ids: List[str]) -> List[Chat]:
        ...

    @abstractmethod
    async def query_messages(self, chat_id: str) -> List[Message]:
        ...

    @abstractmethod
    def subscribe(
        self, resource: str, filter: Optional[Filter], event_types: FrozenSet[str], callback: Callback
    ) -> ChannelHandle:
        ...

    @abstractmethod
    def unsubscribe(self, handle: ChannelHandle) -> None:
        ...

