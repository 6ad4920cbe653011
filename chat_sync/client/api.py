"""HTTP client for the backend's row-oriented REST API."""
from typing import Any, Dict, Iterable, List, Optional

import requests

from . import config
from .storage import get_token
from ..shared.errors import NetworkError

CHAT_SELECT = "*,chat_members(user_id,users(id,username,avatar_url))"
MESSAGE_SELECT = "*,user:users(*)"


def in_list(values: Iterable[str]) -> str:
    quoted = ",".join(f'"{v}"' for v in values)
    return f"in.({quoted})"


class APIClient:
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        session: Optional[requests.Session] = None,
        timeout: float = config.REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.http = session or requests.Session()
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        token = get_token() or self.api_key
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        url = f"{self.base_url}{config.REST_PREFIX}/{table}"
        try:
            resp = self.http.get(url, params=params, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise NetworkError(f"GET {table} failed", status=status) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"GET {table} failed: {exc}") from exc
        try:
            rows = resp.json()
        except ValueError as exc:
            raise NetworkError(f"GET {table} returned a non-JSON body") from exc
        if not isinstance(rows, list):
            raise NetworkError(f"GET {table} returned {type(rows).__name__}, expected a row list")
        return rows

    def list_memberships(self, user_id: str) -> List[Dict[str, Any]]:
        return self._select("chat_members", {"select": "chat_id,user_id", "user_id": f"eq.{user_id}"})

    def list_chats(self, chat_ids: List[str]) -> List[Dict[str, Any]]:
        return self._select(
            "chats",
            {"select": CHAT_SELECT, "id": in_list(chat_ids), "order": "updated_at.desc"},
        )

    def list_messages(self, chat_id: str) -> List[Dict[str, Any]]:
        return self._select(
            "messages",
            {"select": MESSAGE_SELECT, "chat_id": f"eq.{chat_id}", "order": "created_at.asc,id.asc"},
        )

    def list_change_keys(
        self, table: str, stamp_column: str, filter_column: Optional[str] = None, filter_value: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Return ``id`` and ``stamp_column`` for every visible row, used for change detection."""
        params = {"select": f"id,{stamp_column}"}
        if filter_column:
            params[filter_column] = f"eq.{filter_value}"
        return self._select(table, params)
