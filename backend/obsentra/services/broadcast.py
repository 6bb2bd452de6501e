"""
Broadcast Mediator
==================

Takes one event and gets it to every connected subscriber.

HOW A BROADCAST WORKS:
---------------------
1. Turn the event into JSON once (not once per subscriber!)
2. Grab a snapshot of the registry
3. For each subscriber:
   - closed already?        -> mark for removal, skip
   - send() said no/raised? -> mark for removal, keep going
4. After the loop, unregister + close everyone we marked

One broken subscriber never stops the others from getting the event, and the
caller of publish() never sees a delivery error.

Publishing is serialized with a lock so every subscriber gets events in the
same order they were published.
"""

from __future__ import annotations

import logging
import threading

from obsentra.models import Event
from obsentra.services.subscriber import Subscriber
from obsentra.services.subscriber_registry import SubscriberRegistry

logger = logging.getLogger(__name__)


class BroadcastMediator:
    """Fans serialized events out to the subscribers in a registry."""

    def __init__(self, registry: SubscriberRegistry):
        self.registry = registry
        self._publish_lock = threading.Lock()

    # =========================================================================
    # PUBLISHING
    # =========================================================================

    def publish(self, event: Event):
        """Deliver `event` to every registered subscriber, pruning dead ones."""
        payload = event.to_wire()

        with self._publish_lock:
            dead: list[Subscriber] = []
            delivered = 0

            for subscriber in self.registry.snapshot():
                if self._try_send(subscriber, payload):
                    delivered += 1
                else:
                    dead.append(subscriber)

            for subscriber in dead:
                self._prune(subscriber)

        logger.debug(
            f"Broadcast {event.type} to {delivered} subscriber(s), pruned {len(dead)}"
        )

    def deliver(self, subscriber: Subscriber, event: Event) -> bool:
        """Send `event` to a single subscriber. Prunes it if delivery fails."""
        with self._publish_lock:
            if self._try_send(subscriber, event.to_wire()):
                return True
            self._prune(subscriber)
            return False

    def admit(self, subscriber: Subscriber, greeting: Event) -> bool:
        """
        Register a new subscriber and send it `greeting`.

        Both happen under the publish lock, so nothing published elsewhere can
        reach the subscriber before its greeting does.
        """
        with self._publish_lock:
            self.registry.register(subscriber)
            if self._try_send(subscriber, greeting.to_wire()):
                return True
            self._prune(subscriber)
            return False

    # =========================================================================
    # HOUSEKEEPING
    # =========================================================================

    def sweep(self) -> int:
        """Remove every subscriber that is no longer open. Returns how many."""
        with self._publish_lock:
            stale = [s for s in self.registry.snapshot() if not self._is_open(s)]
            for subscriber in stale:
                self._prune(subscriber)
        if stale:
            logger.info(f"Sweep removed {len(stale)} stale subscriber(s)")
        return len(stale)

    def remove(self, subscriber: Subscriber) -> bool:
        """Unregister and close `subscriber`. Calling it twice is harmless."""
        if not self.registry.unregister(subscriber):
            return False
        try:
            subscriber.close()
        except Exception as e:
            logger.warning(f"Error closing subscriber {subscriber.id}: {e}")
        return True

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _is_open(self, subscriber: Subscriber) -> bool:
        try:
            return subscriber.is_open()
        except Exception as e:
            logger.warning(f"Liveness check failed for subscriber {subscriber.id}: {e}")
            return False

    def _try_send(self, subscriber: Subscriber, payload: str) -> bool:
        if not self._is_open(subscriber):
            return False
        try:
            return bool(subscriber.send(payload))
        except Exception as e:
            logger.warning(f"Delivery to subscriber {subscriber.id} failed: {e}")
            return False

    def _prune(self, subscriber: Subscriber):
        if self.remove(subscriber):
            logger.warning(f"Dropped subscriber {subscriber.id}")
