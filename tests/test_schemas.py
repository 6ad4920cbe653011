import pytest

from chat_sync.client.schemas import parse_chats, parse_memberships, parse_messages
from chat_sync.shared.errors import DataIntegrityError, NetworkError


def chat_row(**overrides):
    row = {
        "id": "c1",
        "name": "Demo team",
        "type": "group",
        "created_by": "u1",
        "created_at": "2026-10-01T08:00:00+00:00",
        "updated_at": "2026-10-19T09:30:00+00:00",
        "chat_members": [
            {"user_id": "u1", "users": {"id": "u1", "username": "alice", "avatar_url": None}},
            {"user_id": "u2", "users": {"username": "bob", "avatar_url": "https://cdn.example/bob.png"}},
            {"user_id": "u3", "users": None},
        ],
    }
    row.update(overrides)
    return row


def test_chat_rows_become_entities_with_members():
    [chat] = parse_chats([chat_row()])
    assert chat.id == "c1"
    assert chat.is_group
    assert chat.updated_at.hour == 9
    assert [m.chat_id for m in chat.members] == ["c1", "c1", "c1"]
    assert chat.members[1].user.id == "u2"
    assert chat.members[1].user.avatar_url == "https://cdn.example/bob.png"
    assert chat.members[2].user is None
    with pytest.raises(DataIntegrityError):
        chat.members[2].require_user()


def test_optional_chat_fields():
    [chat] = parse_chats(
        [
            chat_row(
                unread_count=-2,
                last_message={"content": "ok", "created_at": "2026-10-19T09:00:00Z", "user": {"username": "bob"}},
            )
        ]
    )
    assert chat.unread_count == 0
    assert chat.last_message.content == "ok"
    assert chat.last_message.username == "bob"


def test_numeric_ids_are_normalised_to_strings():
    [membership] = parse_memberships([{"chat_id": 7, "user_id": 42}])
    assert membership.chat_id == "7"
    assert membership.user_id == "42"


def test_message_rows_carry_author():
    [message] = parse_messages(
        [
            {
                "id": 1,
                "chat_id": "c1",
                "user_id": "u2",
                "content": "hello",
                "created_at": "2026-10-19T10:00:00+00:00",
                "user": {"id": "u2", "username": "bob"},
            }
        ]
    )
    assert message.id == "1"
    assert message.user.username == "bob"


def test_malformed_rows_raise_network_error():
    with pytest.raises(NetworkError):
        parse_chats([{"id": "c1", "name": "x"}])
