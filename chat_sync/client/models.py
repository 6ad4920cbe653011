"""View models handed to the presentation layer."""
from dataclasses import dataclass
from typing import Optional, Tuple

from ..shared.dto import Message


@dataclass(frozen=True)
class ChatViewModel:
    chat_id: str
    name: str
    type: str
    display_name: str
    avatar_url: Optional[str]
    initials: str
    tags: Tuple[str, ...]
    tag_colors: Tuple[str, ...]
    last_message_preview: str
    unread_count: int
    member_count: int
    status_label: str
    timestamp_label: str


@dataclass(frozen=True)
class MessageViewModel:
    message: Message
    show_avatar: bool
    show_username: bool
    is_own: bool
    is_system: bool
    username: Optional[str]
    time_label: str


@dataclass(frozen=True)
class MessageGroup:
    label: str
    messages: Tuple[MessageViewModel, ...]
