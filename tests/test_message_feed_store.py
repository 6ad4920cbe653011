import asyncio
import unittest

from chat_sync.client.backend import INSERT, MESSAGES, UPDATE
from chat_sync.client.message_feed import MessageFeedStore
from chat_sync.shared.errors import NetworkError
from tests.fakes import NOW, FakeBackend, at, settle


def seeded_backend() -> FakeBackend:
    backend = FakeBackend()
    backend.add_user("me", "me")
    backend.add_user("a", "anna")
    backend.add_user("b", "ben")
    backend.add_chat("c1", "Anna", "direct", members=["me", "a"])
    backend.add_chat("c2", "Team", "group", members=["me", "a", "b"])
    backend.add_message("3", "c1", "a", "later", at(hour=11))
    backend.add_message("2", "c1", "me", "same time, higher id", at(hour=10))
    backend.add_message("1", "c1", "a", "first", at(hour=10))
    backend.add_message("y", "c1", "a", "yesterday", at(1, hour=9))
    backend.add_message("t1", "c2", "b", "team hello", at(hour=8))
    return backend


class MessageFeedStoreTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.backend = seeded_backend()
        self.store = MessageFeedStore(self.backend, current_user_id="me")

    async def asyncTearDown(self):
        await self.store.dispose()

    async def test_load_orders_by_time_then_id(self):
        self.assertTrue(await self.store.load("c1"))
        self.assertEqual([m.id for m in self.store.messages], ["y", "1", "2", "3"])
        groups = self.store.groups(NOW)
        self.assertEqual([g.label for g in groups], ["Yesterday", "Today"])
        self.assertEqual([m.show_avatar for m in groups[1].messages], [True, False, True])

    async def test_selecting_nothing_clears_without_fetch_or_channel(self):
        await self.store.select("c1")
        self.assertTrue(await self.store.select(None))
        self.assertEqual(self.store.messages, [])
        self.assertIsNone(self.store.chat_id)
        self.assertEqual(self.backend.channels, [])
        self.assertEqual(self.backend.count("messages"), 1)

    async def test_insert_event_reloads_whole_feed_with_authors(self):
        await self.store.select("c1")
        self.backend.add_message("4", "c1", "b", "new one", at(hour=12))

        self.assertEqual(self.backend.emit(MESSAGES, INSERT, chat_id="c1", id="4"), 1)
        await settle()

        self.assertEqual(self.store.messages[-1].id, "4")
        self.assertEqual(self.store.messages[-1].user.username, "ben")
        self.assertEqual(self.backend.count("messages"), 2)

    async def test_only_inserts_on_the_open_chat_trigger_reload(self):
        await self.store.select("c1")
        self.assertEqual(self.backend.emit(MESSAGES, UPDATE, chat_id="c1", id="1"), 0)
        self.assertEqual(self.backend.emit(MESSAGES, INSERT, chat_id="c2", id="t2"), 0)
        await settle()
        self.assertEqual(self.backend.count("messages"), 1)

    async def test_switching_chats_keeps_a_single_channel(self):
        await self.store.select("c1")
        first_handle = self.store.subscriptions.active(self.store.slot).handle
        await self.store.select("c2")

        self.assertFalse(first_handle.active)
        self.assertEqual(len(self.backend.channels), 1)
        self.assertEqual(self.backend.max_active_per_resource[MESSAGES], 1)
        self.assertEqual(self.backend.channels[0][0].filter.value, "c2")
        self.assertEqual([m.id for m in self.store.messages], ["t1"])

    async def test_stale_fetch_for_previous_chat_is_ignored(self):
        gate = self.backend.hold("messages", "c1")
        pending = asyncio.ensure_future(self.store.select("c1"))
        await settle()

        self.assertTrue(await self.store.select("c2"))
        gate.set()
        self.assertFalse(await pending)

        self.assertEqual(self.store.chat_id, "c2")
        self.assertEqual([m.chat_id for m in self.store.messages], ["c2"])

    async def test_event_for_previous_chat_after_switch_is_dropped(self):
        await self.store.select("c1")
        self.backend.hold("messages", "c1")
        self.backend.emit(MESSAGES, INSERT, chat_id="c1", id="9")
        await settle()
        await self.store.select("c2")
        self.backend.emit_late(MESSAGES, INSERT, chat_id="c1", id="10")
        await settle()

        self.assertEqual(self.store.chat_id, "c2")
        self.assertEqual([m.id for m in self.store.messages], ["t1"])

    async def test_failed_load_keeps_previous_feed(self):
        await self.store.select("c1")
        before = list(self.store.messages)
        self.backend.fail("messages")
        self.assertFalse(await self.store.refresh())
        self.assertEqual(self.store.messages, before)
        self.assertTrue(self.store.stale)
        self.assertIsInstance(self.store.last_error, NetworkError)
        self.assertFalse(self.store.is_loading)

    async def test_failed_load_of_another_chat_keeps_scope_and_live_updates(self):
        await self.store.select("c1")
        self.backend.fail("messages")

        self.assertFalse(await self.store.load("c2"))

        self.assertEqual(self.store.chat_id, "c1")
        self.assertTrue(all(m.chat_id == "c1" for m in self.store.messages))

        self.backend.add_message("5", "c1", "a", "still here", at(hour=13))
        self.assertEqual(self.backend.emit(MESSAGES, INSERT, chat_id="c1", id="5"), 1)
        await settle()
        self.assertEqual(self.store.messages[-1].id, "5")

    async def test_direct_load_binds_chat_on_success(self):
        self.assertTrue(await self.store.load("c2"))
        self.assertEqual(self.store.chat_id, "c2")

    async def test_repeated_loads_give_identical_groups(self):
        await self.store.load("c1")
        first = self.store.groups(NOW)
        await self.store.load("c1")
        self.assertEqual(self.store.groups(NOW), first)

    async def test_refresh_without_chat_does_nothing(self):
        self.assertFalse(await self.store.refresh())
        self.assertEqual(self.backend.calls, [])
