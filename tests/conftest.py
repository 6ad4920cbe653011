import os
import tempfile

# Keep state and log files out of the real home directory; must run before chat_sync is imported.
_SANDBOX = tempfile.mkdtemp(prefix="chat_sync_tests_")
os.environ.setdefault("CHAT_SYNC_HOME", _SANDBOX)
os.environ.setdefault("CHAT_SYNC_LOG_FILE", os.path.join(_SANDBOX, "client.log"))
os.environ.setdefault("CHAT_SYNC_STATE_FILE", os.path.join(_SANDBOX, "state.json"))

import pytest

from tests.fakes import NOW, FakeBackend


@pytest.fixture
def backend():
    """In-memory backend with two users sharing a direct chat."""
    fake = FakeBackend()
    fake.add_user("u1", "alice")
    fake.add_user("u2", "bob", avatar_url="https://cdn.example/bob.png")
    fake.add_chat("c1", "Bob chat", "direct", members=["u1", "u2"], updated_at=NOW)
    return fake


@pytest.fixture
def now():
    return NOW
