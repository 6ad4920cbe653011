"""Canonical entities cached by the client core."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .errors import DataIntegrityError

DIRECT = "direct"
GROUP = "group"


@dataclass(frozen=True)
class User:
    id: str
    username: str
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class Membership:
    chat_id: str
    user_id: str
    user: Optional[User] = None

    def require_user(self) -> User:
        if self.user is None:
            raise DataIntegrityError(f"membership {self.chat_id}/{self.user_id} has no user row")
        return self.user


@dataclass(frozen=True)
class LastMessage:
    content: str
    created_at: datetime
    username: Optional[str] = None


@dataclass(frozen=True)
class Chat:
    id: str
    name: str
    type: str
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime
    members: List[Membership] = field(default_factory=list)
    last_message: Optional[LastMessage] = None
    unread_count: int = 0

    @property
    def is_group(self) -> bool:
        return self.type == GROUP


@dataclass(frozen=True)
class Message:
    id: str
    chat_id: str
    user_id: str
    content: str
    created_at: datetime
    user: Optional[User] = None
