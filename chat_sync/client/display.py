"""Presentation attributes derived from chat, membership and user rows.

Everything here is a pure function of its arguments. Missing user rows never
abort a derivation: the chat's raw name and no avatar are used instead.
"""
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from .models import ChatViewModel
from ..shared.dto import DIRECT, GROUP, Chat, Membership
from ..shared.errors import DataIntegrityError
from ..shared.utils import as_local, contains_ci, initials, matching_terms

TAG_COLORS = {
    "demo": "blue",
    "internal": "purple",
    "signup": "green",
    "content": "orange",
    "support": "red",
}
DEFAULT_TAG_COLOR = "gray"
NO_MESSAGES = "No messages yet"

CHAT_TYPE_FILTERS = ("all", DIRECT, GROUP)


def counterpart(
    memberships: Sequence[Membership], current_user_id: Optional[str]
) -> Optional[Membership]:
    """First member of a direct chat that is not the current user."""
    return next((m for m in memberships if m.user_id != current_user_id), None)


def display_name(
    chat: Chat, memberships: Optional[Sequence[Membership]] = None, current_user_id: Optional[str] = None
) -> str:
    if chat.is_group:
        return chat.name
    other = counterpart(chat.members if memberships is None else memberships, current_user_id)
    if other is None:
        return chat.name
    try:
        return other.require_user().username or chat.name
    except DataIntegrityError:
        return chat.name


def avatar(
    chat: Chat, memberships: Optional[Sequence[Membership]] = None, current_user_id: Optional[str] = None
) -> Optional[str]:
    """Counterpart avatar for direct chats; None for groups (callers show a group icon)."""
    if chat.is_group:
        return None
    other = counterpart(chat.members if memberships is None else memberships, current_user_id)
    if other is None:
        return None
    try:
        return other.require_user().avatar_url or None
    except DataIntegrityError:
        return None


def tags(chat: Chat) -> List[str]:
    return [term.capitalize() for term in matching_terms(chat.name)]


def tag_color(tag: str) -> str:
    return TAG_COLORS.get(tag.lower(), DEFAULT_TAG_COLOR)


def status_label(chat: Chat, memberships: Optional[Sequence[Membership]] = None) -> str:
    if chat.is_group:
        return f"{len(chat.members if memberships is None else memberships)} members"
    # Presence is not tracked; direct chats always read as online.
    return "Online"


def last_message_preview(chat: Chat) -> str:
    return chat.last_message.content if chat.last_message else NO_MESSAGES


def timestamp_label(chat: Chat, now: Optional[datetime] = None) -> str:
    """Time of the last message, or the chat's creation date when it has none."""
    tz = (now or datetime.now().astimezone()).tzinfo
    if chat.last_message:
        return as_local(chat.last_message.created_at, tz).strftime("%H:%M")
    created = as_local(chat.created_at, tz)
    return f"{created.month}/{created.day}/{created.year}"


def build_chat_view(chat: Chat, current_user_id: Optional[str], now: Optional[datetime] = None) -> ChatViewModel:
    name = display_name(chat, chat.members, current_user_id)
    chat_tags = tags(chat)
    return ChatViewModel(
        chat_id=chat.id,
        name=chat.name,
        type=chat.type,
        display_name=name,
        avatar_url=avatar(chat, chat.members, current_user_id),
        initials="" if chat.is_group else initials(name),
        tags=tuple(chat_tags),
        tag_colors=tuple(tag_color(t) for t in chat_tags),
        last_message_preview=last_message_preview(chat),
        unread_count=max(chat.unread_count, 0),
        member_count=len(chat.members),
        status_label=status_label(chat, chat.members),
        timestamp_label=timestamp_label(chat, now),
    )


def build_chat_list(
    chats: Iterable[Chat], current_user_id: Optional[str], now: Optional[datetime] = None
) -> List[ChatViewModel]:
    return [build_chat_view(chat, current_user_id, now) for chat in chats]


def filter_chats(views: Iterable[ChatViewModel], search: str = "", chat_type: str = "all") -> List[ChatViewModel]:
    """Case-insensitive search on the raw chat name, optionally narrowed to one chat type."""
    if chat_type not in CHAT_TYPE_FILTERS:
        raise ValueError(f"Unknown chat type filter: {chat_type}")
    return [
        view
        for view in views
        if (not search or contains_ci(view.name, search)) and (chat_type == "all" or view.type == chat_type)
    ]
