"""Local client storage for backend location and the signed-in session."""
import json
from typing import Any, Dict, Optional

from . import config


def load_state() -> Dict[str, Any]:
    if config.STATE_FILE.exists():
        with config.STATE_FILE.open("r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def save_state(data: Dict[str, Any]) -> None:
    config.STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
    with config.STATE_FILE.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def store_server(url: str, api_key: str) -> None:
    state = load_state()
    state["server_url"] = url.rstrip("/")
    state["api_key"] = api_key
    save_state(state)


def store_session(token: str, user: Dict[str, Any]) -> None:
    """Remember a session established elsewhere (the core never signs in itself)."""
    state = load_state()
    state["token"] = token
    state["user"] = user
    save_state(state)


def clear_session() -> None:
    state = load_state()
    for key in ["token", "user"]:
        state.pop(key, None)
    save_state(state)


def get_server_url() -> str:
    return load_state().get("server_url") or config.BACKEND_URL


def get_api_key() -> str:
    return load_state().get("api_key") or config.API_KEY


def get_token() -> Optional[str]:
    return load_state().get("token")


def get_user() -> Optional[Dict[str, Any]]:
    return load_state().get("user")
