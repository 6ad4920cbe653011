"""Console front-end for browsing chats and following the open feed."""
import asyncio
import sys
from typing import Optional

from .app import ChatController
from .display import CHAT_TYPE_FILTERS
from .logging_config import configure_logging
from .models import ChatViewModel
from .storage import get_server_url, get_user, store_session


class ConsoleClient:
    """Interactive console loop over a ChatController."""

    def __init__(self, controller: ChatController):
        self.controller = controller

    async def ask(self, prompt: str) -> str:
        return (await asyncio.to_thread(input, prompt)).strip()

    def _chat_line(self, index: int, chat: ChatViewModel) -> str:
        tags = f" [{', '.join(chat.tags)}]" if chat.tags else ""
        unread = f" ({chat.unread_count})" if chat.unread_count else ""
        return f"{index:>2}. {chat.display_name}{unread}{tags} - {chat.last_message_preview} · {chat.timestamp_label}"

    def show_chats(self) -> None:
        chats = self.controller.chat_list
        if not chats:
            print("No chats found.")
        for index, chat in enumerate(chats, start=1):
            print(self._chat_line(index, chat))
        if self.controller.is_stale:
            print("(showing last known state, refresh to retry)")

    def show_feed(self) -> None:
        chat = self.controller.selected_chat()
        if chat is None:
            print("No chat selected.")
            return
        print(f"=== {chat.display_name} · {chat.status_label} ===")
        groups = self.controller.active_feed
        if not groups:
            print("No messages yet.")
        for group in groups:
            print(f"--- {group.label} ---")
            for item in group.messages:
                author = "you" if item.is_own else (item.username or item.message.user_id)
                if item.is_system:
                    author = f"{author} [System]"
                prefix = f"{author}: " if item.show_username or item.is_own else "    "
                print(f"[{item.time_label}] {prefix}{item.message.content}")

    async def open_chat(self) -> None:
        chats = self.controller.chat_list
        choice = await self.ask("Chat number: ")
        if not choice.isdigit() or not 1 <= int(choice) <= len(chats):
            print("No such chat.")
            return
        await self.controller.select_chat(chats[int(choice) - 1].chat_id)
        self.show_feed()

    async def change_filter(self) -> None:
        search = await self.ask("Search (blank for all): ")
        chat_type = await self.ask(f"Type {'/'.join(CHAT_TYPE_FILTERS)}: ") or "all"
        if chat_type not in CHAT_TYPE_FILTERS:
            print("Unknown chat type.")
            return
        self.controller.set_filter(search, chat_type)
        self.show_chats()

    async def run(self) -> None:
        await self.controller.start()
        self.show_chats()
        while True:
            print("\nCommands: [l]ist, [o]pen, [f]ilter, [r]efresh, [q]uit")
            cmd = (await self.ask("> ")).lower()
            if cmd == "q":
                break
            if cmd == "l":
                self.show_chats()
            if cmd == "o":
                await self.open_chat()
            if cmd == "f":
                await self.change_filter()
            if cmd == "r":
                await self.controller.refresh_chat_list()
                await self.controller.refresh_active_feed()
                self.show_chats()
                if self.controller.selected_chat_id:
                    self.show_feed()
        await self.controller.close()


def _session_user() -> Optional[dict]:
    user = get_user()
    if user:
        return user
    user_id = input("User id of the signed-in account: ").strip()
    if not user_id:
        return None
    token = input("Access token (blank to use the API key): ").strip()
    user = {"id": user_id}
    store_session(token, user)
    return user


def main():
    configure_logging()
    print("Chat Sync Console")
    controller = ChatController(user=_session_user())
    if not get_server_url():
        url = input("Backend URL (e.g. https://example.supabase.co): ").strip()
        api_key = input("API key: ").strip()
        controller.set_base_url(url, api_key)
    try:
        asyncio.run(ConsoleClient(controller).run())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
