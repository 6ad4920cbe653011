"""Date buckets and per-message display flags for a chat feed."""
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from . import config
from .models import MessageGroup, MessageViewModel
from ..shared.dto import Message, User
from ..shared.utils import as_local, contains_ci

TODAY = "Today"
YESTERDAY = "Yesterday"


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now().astimezone()


def date_label(created_at: datetime, now: Optional[datetime] = None) -> str:
    now = _now(now)
    day = as_local(created_at, now.tzinfo).date()
    today = now.date()
    if day == today:
        return TODAY
    if day == today - timedelta(days=1):
        return YESTERDAY
    return f"{day:%B} {day.day}, {day.year}"


def format_message_time(created_at: datetime, now: Optional[datetime] = None) -> str:
    now = _now(now)
    local = as_local(created_at, now.tzinfo)
    label = date_label(created_at, now)
    if label == TODAY:
        return f"{local:%H:%M}"
    if label == YESTERDAY:
        return f"Yesterday {local:%H:%M}"
    return f"{local:%b} {local.day}, {local:%H:%M}"


def is_system_author(user: Optional[User], tokens: Sequence[str] = config.SYSTEM_TOKENS) -> bool:
    if user is None:
        return False
    return any(contains_ci(user.username, token) for token in tokens if token)


def group_by_date(
    messages: Iterable[Message],
    current_user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[MessageGroup]:
    """Split an ordered feed into day buckets in order of first appearance.

    Input order is kept inside each bucket. A message shows its avatar and
    username when someone other than the current user wrote it and it opens
    its bucket or follows a message by a different author.
    """
    now = _now(now)
    buckets: Dict[str, List[MessageViewModel]] = {}
    for message in messages:
        bucket = buckets.setdefault(date_label(message.created_at, now), [])
        is_own = current_user_id is not None and message.user_id == current_user_id
        show = not is_own and (not bucket or bucket[-1].message.user_id != message.user_id)
        bucket.append(
            MessageViewModel(
                message=message,
                show_avatar=show,
                show_username=show,
                is_own=is_own,
                is_system=is_system_author(message.user),
                username=message.user.username if message.user else None,
                time_label=format_message_time(message.created_at, now),
            )
        )
    return [MessageGroup(label=label, messages=tuple(items)) for label, items in buckets.items()]
