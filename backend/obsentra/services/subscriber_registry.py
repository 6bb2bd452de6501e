"""Registry of live streaming subscribers."""

from __future__ import annotations

import logging
import threading

from obsentra.services.subscriber import Subscriber

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """
    Tracks every connected subscriber by id.

    The broadcaster iterates over snapshot() copies, so removing a subscriber
    in the middle of a broadcast never disturbs the loop.
    """

    def __init__(self):
        self._subscribers: dict[str, Subscriber] = {}
        self._lock = threading.Lock()

    def register(self, subscriber: Subscriber):
        with self._lock:
            if subscriber.id in self._subscribers:
                logger.warning(f"Subscriber {subscriber.id} registered twice, replacing")
            self._subscribers[subscriber.id] = subscriber
            total = len(self._subscribers)
        logger.debug(f"Registered subscriber {subscriber.id} ({total} connected)")

    def unregister(self, subscriber: Subscriber) -> bool:
        """Remove `subscriber`. Returns False if it was already gone."""
        with self._lock:
            current = self._subscribers.get(subscriber.id)
            if current is not subscriber:
                return False
            del self._subscribers[subscriber.id]
            total = len(self._subscribers)
        logger.debug(f"Unregistered subscriber {subscriber.id} ({total} connected)")
        return True

    def snapshot(self) -> list[Subscriber]:
        with self._lock:
            return list(self._subscribers.values())

    def clear(self) -> list[Subscriber]:
        with self._lock:
            subscribers = list(self._subscribers.values())
            self._subscribers.clear()
        return subscribers

    def __contains__(self, subscriber: Subscriber) -> bool:
        with self._lock:
            return self._subscribers.get(subscriber.id) is subscriber

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)
