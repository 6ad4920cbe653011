"""Pydantic schemas for rows returned by the backend's row API."""
from datetime import datetime
from typing import Annotated, Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError

from ..shared.dto import Chat, LastMessage, Membership, Message, User
from ..shared.errors import NetworkError

RowId = Annotated[str, BeforeValidator(lambda v: str(v) if v is not None else v)]


class RowModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class UserOut(RowModel):
    id: Optional[RowId] = None
    username: str
    avatar_url: Optional[str] = None

    def to_entity(self, user_id: Optional[str] = None) -> User:
        return User(id=self.id or user_id or "", username=self.username, avatar_url=self.avatar_url)


class MembershipOut(RowModel):
    chat_id: Optional[RowId] = None
    user_id: RowId
    users: Optional[UserOut] = None

    def to_entity(self, chat_id: Optional[str] = None) -> Membership:
        user = self.users.to_entity(self.user_id) if self.users else None
        return Membership(chat_id=self.chat_id or chat_id or "", user_id=self.user_id, user=user)


class AuthorOut(RowModel):
    username: str


class LastMessageOut(RowModel):
    content: str
    created_at: datetime
    user: Optional[AuthorOut] = None


class ChatOut(RowModel):
    id: RowId
    name: str
    type: str
    created_by: Optional[RowId] = None
    created_at: datetime
    updated_at: datetime
    chat_members: List[MembershipOut] = []
    last_message: Optional[LastMessageOut] = None
    unread_count: Optional[int] = 0

    def to_entity(self) -> Chat:
        last = None
        if self.last_message:
            last = LastMessage(
                content=self.last_message.content,
                created_at=self.last_message.created_at,
                username=self.last_message.user.username if self.last_message.user else None,
            )
        return Chat(
            id=self.id,
            name=self.name,
            type=self.type,
            created_by=self.created_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
            members=[m.to_entity(self.id) for m in self.chat_members],
            last_message=last,
            unread_count=max(self.unread_count or 0, 0),
        )


class MessageOut(RowModel):
    id: RowId
    chat_id: RowId
    user_id: RowId
    content: str
    created_at: datetime
    user: Optional[UserOut] = None

    def to_entity(self) -> Message:
        return Message(
            id=self.id,
            chat_id=self.chat_id,
            user_id=self.user_id,
            content=self.content,
            created_at=self.created_at,
            user=self.user.to_entity(self.user_id) if self.user else None,
        )


def _validate(model: type, rows: Iterable[Dict[str, Any]], what: str) -> List[Any]:
    try:
        return [model.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise NetworkError(f"Malformed {what} response: {exc.error_count()} invalid field(s)") from exc


def parse_memberships(rows: Iterable[Dict[str, Any]]) -> List[Membership]:
    return [m.to_entity() for m in _validate(MembershipOut, rows, "chat_members")]


def parse_chats(rows: Iterable[Dict[str, Any]]) -> List[Chat]:
    return [c.to_entity() for c in _validate(ChatOut, rows, "chats")]


def parse_messages(rows: Iterable[Dict[str, Any]]) -> List[Message]:
    return [m.to_entity() for m in _validate(MessageOut, rows, "messages")]
