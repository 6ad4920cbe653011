"""Client configuration values."""
import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("CHAT_SYNC_HOME", Path.home() / ".chat_sync"))

BACKEND_URL = os.environ.get("CHAT_SYNC_URL", "")
API_KEY = os.environ.get("CHAT_SYNC_API_KEY", "")
REST_PREFIX = "/rest/v1"
REQUEST_TIMEOUT = float(os.environ.get("CHAT_SYNC_TIMEOUT", "10"))
POLL_INTERVAL_SECONDS = float(os.environ.get("CHAT_SYNC_POLL_INTERVAL", "2.5"))

# Authors whose username contains one of these are labelled as system senders.
BRAND_TOKEN = os.environ.get("CHAT_SYNC_BRAND_TOKEN", "periskope")
SYSTEM_TOKENS = ("system", BRAND_TOKEN)

LOG_FILE = Path(os.environ.get("CHAT_SYNC_LOG_FILE", BASE_DIR / "client.log"))
STATE_FILE = Path(os.environ.get("CHAT_SYNC_STATE_FILE", BASE_DIR / "state.json"))
