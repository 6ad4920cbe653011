"""Ownership of change channels, one live channel per named slot."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from .backend import ALL_EVENTS, Backend, Callback, ChangeEvent, ChannelHandle, Filter
from .logging_config import configure_logging
from ..shared.errors import SubscriptionError

logger = configure_logging(__name__)


@dataclass(eq=False)
class Subscription:
    slot: str
    callback: Callback
    handle: Optional[ChannelHandle] = None
    active: bool = True

    def deliver(self, event: ChangeEvent) -> None:
        # Transports may deliver after teardown; a released subscription stays silent.
        if self.active:
            self.callback(event)


class SubscriptionManager:
    """Keeps at most one channel per slot and releases it before a replacement opens.

    A manager belongs to the object that owns the slots (a store). Closing the
    manager releases every channel it opened.
    """

    def __init__(self, backend: Backend):
        self.backend = backend
        self._slots: Dict[str, Subscription] = {}

    def open(
        self,
        slot: str,
        resource: str,
        callback: Callback,
        filter: Optional[Filter] = None,
        event_types: FrozenSet[str] = ALL_EVENTS,
    ) -> Subscription:
        self.release(slot)
        subscription = Subscription(slot=slot, callback=callback)
        try:
            subscription.handle = self.backend.subscribe(resource, filter, frozenset(event_types), subscription.deliver)
        except SubscriptionError:
            subscription.active = False
            raise
        except Exception as exc:
            subscription.active = False
            raise SubscriptionError(f"Could not open {resource} channel: {exc}", slot=slot) from exc
        self._slots[slot] = subscription
        logger.info("SUBSCRIBED slot=%s resource=%s filter=%s events=%s", slot, resource, filter, sorted(event_types))
        return subscription

    def release(self, slot: str) -> None:
        subscription = self._slots.pop(slot, None)
        if subscription is None:
            return
        subscription.active = False
        if subscription.handle is None:
            return
        try:
            self.backend.unsubscribe(subscription.handle)
        except Exception as exc:
            raise SubscriptionError(f"Could not close channel for slot {slot}: {exc}", slot=slot) from exc
        logger.info("UNSUBSCRIBED slot=%s resource=%s", slot, subscription.handle.resource)

    def active(self, slot: str) -> Optional[Subscription]:
        return self._slots.get(slot)

    def close(self) -> None:
        failures = []
        for slot in list(self._slots):
            try:
                self.release(slot)
            except SubscriptionError as exc:
                failures.append(exc)
        if failures:
            raise failures[0]
