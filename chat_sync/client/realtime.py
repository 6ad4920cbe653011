"""Change notification by periodically diffing row snapshots."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from .api import APIClient
from .backend import DELETE, INSERT, UPDATE, Callback, ChangeEvent, ChannelHandle
from .logging_config import configure_logging
from ..shared.errors import NetworkError

logger = configure_logging(__name__)

Snapshot = Dict[str, Any]


def diff_snapshots(resource: str, previous: Snapshot, current: Snapshot) -> List[ChangeEvent]:
    """Translate two ``id -> stamp`` snapshots into change events."""
    events: List[ChangeEvent] = []
    for row_id, stamp in current.items():
        if row_id not in previous:
            events.append(ChangeEvent(resource, INSERT, {"id": row_id}))
        elif previous[row_id] != stamp:
            events.append(ChangeEvent(resource, UPDATE, {"id": row_id}))
    for row_id in previous:
        if row_id not in current:
            events.append(ChangeEvent(resource, DELETE, {"id": row_id}))
    return events


class PollingChannel:
    """Polls one filtered resource and delivers changes to a single callback.

    The first poll only records a baseline. Every later poll is compared with
    the previous snapshot and each difference is delivered as an event, as long
    as the handle is still active.
    """

    def __init__(
        self,
        api: APIClient,
        handle: ChannelHandle,
        callback: Callback,
        stamp_column: str,
        interval: float,
    ):
        self.api = api
        self.handle = handle
        self.callback = callback
        self.stamp_column = stamp_column
        self.interval = interval
        self._snapshot: Optional[Snapshot] = None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        self.handle.active = False
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while self.handle.active:
            try:
                await self.poll()
            except NetworkError as exc:
                logger.warning("CHANNEL_POLL_FAIL resource=%s handle=%s error=%s", self.handle.resource, self.handle.id, exc)
            except Exception:  # noqa: BLE001
                logger.exception("CHANNEL_POLL_ERROR resource=%s handle=%s", self.handle.resource, self.handle.id)
            await asyncio.sleep(self.interval)

    async def poll(self) -> List[ChangeEvent]:
        flt = self.handle.filter
        rows = await asyncio.to_thread(
            self.api.list_change_keys,
            self.handle.resource,
            self.stamp_column,
            flt.column if flt else None,
            flt.value if flt else None,
        )
        current = {str(row["id"]): row.get(self.stamp_column) for row in rows}
        previous, self._snapshot = self._snapshot, current
        if previous is None:
            return []
        events = diff_snapshots(self.handle.resource, previous, current)
        if flt is not None:
            # Rows are already filtered server-side; carry the filter column on each record.
            events = [ChangeEvent(e.resource, e.type, {**e.record, flt.column: flt.value}) for e in events]
        for event in events:
            if not self.handle.accepts(event):
                continue
            try:
                self.callback(event)
            except Exception:  # noqa: BLE001
                logger.exception("CHANNEL_CALLBACK_FAIL resource=%s handle=%s", self.handle.resource, self.handle.id)
        return events
