from datetime import timedelta

import pytest

from chat_sync.client import display
from chat_sync.shared.dto import Chat, LastMessage, Membership, User
from tests.fakes import NOW, at

ALICE = User("u1", "alice")
BOB = User("u2", "bob", avatar_url="https://cdn.example/bob.png")


def make_chat(name="Bob chat", chat_type="direct", members=None, **extra):
    if members is None:
        members = [Membership("c1", "u1", ALICE), Membership("c1", "u2", BOB)]
    return Chat(
        id="c1",
        name=name,
        type=chat_type,
        created_by="u1",
        created_at=NOW - timedelta(days=3),
        updated_at=NOW,
        members=members,
        **extra,
    )


def test_direct_chat_shows_counterpart_username():
    chat = make_chat()
    assert display.display_name(chat, chat.members, "u1") == "bob"
    assert display.display_name(chat, chat.members, "u2") == "alice"


def test_direct_chat_without_counterpart_uses_raw_name():
    chat = make_chat(members=[Membership("c1", "u1", ALICE)])
    assert display.display_name(chat, chat.members, "u1") == "Bob chat"


def test_direct_chat_with_dangling_member_falls_back():
    chat = make_chat(members=[Membership("c1", "u1", ALICE), Membership("c1", "u2", None)])
    assert display.display_name(chat, chat.members, "u1") == "Bob chat"
    assert display.avatar(chat, chat.members, "u1") is None


def test_group_chat_always_uses_raw_name():
    chat = make_chat(name="Team", chat_type="group")
    assert display.display_name(chat, chat.members, "u1") == "Team"
    assert display.display_name(chat, [], "u1") == "Team"
    assert display.avatar(chat, chat.members, "u1") is None


def test_direct_chat_avatar_is_counterparts():
    chat = make_chat()
    assert display.avatar(chat, chat.members, "u1") == "https://cdn.example/bob.png"
    assert display.avatar(chat, chat.members, "u2") is None


def test_tags_follow_vocabulary_order():
    assert display.tags(make_chat(name="Demo – Support Escalation")) == ["Demo", "Support"]
    assert display.tags(make_chat(name="SUPPORT for internal DEMO")) == ["Demo", "Internal", "Support"]
    assert display.tags(make_chat(name="Weekly sync")) == []


def test_tag_colors_have_fallback():
    assert display.tag_color("Demo") == "blue"
    assert display.tag_color("support") == "red"
    assert display.tag_color("Billing") == display.DEFAULT_TAG_COLOR


def test_status_and_preview_labels():
    group = make_chat(chat_type="group")
    assert display.status_label(group) == "2 members"
    assert display.status_label(make_chat()) == "Online"
    assert display.last_message_preview(group) == "No messages yet"
    chat = make_chat(last_message=LastMessage("see you", at(hour=9, minute=5), "bob"))
    assert display.last_message_preview(chat) == "see you"
    assert display.timestamp_label(chat, NOW) == "09:05"
    assert display.timestamp_label(group, NOW) == "10/16/2026"


def test_chat_view_model():
    view = display.build_chat_view(make_chat(name="demo with bob", unread_count=-4), "u1", NOW)
    assert view.display_name == "bob"
    assert view.initials == "BO"
    assert view.tags == ("Demo",)
    assert view.tag_colors == ("blue",)
    assert view.unread_count == 0
    assert view.member_count == 2
    group_view = display.build_chat_view(make_chat(chat_type="group", unread_count=3), "u1", NOW)
    assert group_view.initials == ""
    assert group_view.unread_count == 3


def test_filter_chats_by_name_and_type():
    views = [
        display.build_chat_view(make_chat(name="Support desk", chat_type="group"), "u1", NOW),
        display.build_chat_view(make_chat(name="Bob chat"), "u1", NOW),
    ]
    assert [v.name for v in display.filter_chats(views, "SUPPORT")] == ["Support desk"]
    assert [v.name for v in display.filter_chats(views, chat_type="direct")] == ["Bob chat"]
    assert display.filter_chats(views, "bob", "group") == []
    with pytest.raises(ValueError):
        display.filter_chats(views, chat_type="channel")
