"""
Relay Hub
=========

This is the BRAIN of the relay!

WHAT IT DOES:
------------
1. Remembers which sensor is currently selected
2. Keeps track of everyone connected to the live stream
3. Broadcasts selection changes and sensor readings to all of them
4. Handles the connect / message / disconnect lifecycle of stream clients
5. Periodically sweeps out connections that died quietly

Both the HTTP routes and the WebSocket route talk to the same hub, so a
selection made over HTTP and one made over the stream end up in the same place
(last write wins).

Nothing here is global. The app creates one hub at startup and hands it to the
routers; tests just create their own.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pydantic import ValidationError

from obsentra.models import (
    EventType,
    ReadingReported,
    SelectionChanged,
    SelectionUpdateMessage,
    StatusResponse,
)
from obsentra.services.broadcast import BroadcastMediator
from obsentra.services.selection_state import SelectionState
from obsentra.services.subscriber import Subscriber
from obsentra.services.subscriber_registry import SubscriberRegistry

logger = logging.getLogger(__name__)


class RelayHub:
    """
    Owns the selection, the subscriber registry and the broadcaster.
    """

    SWEEP_JOB_ID = "subscriber_sweep"

    def __init__(self, max_pending: int = 100, sweep_interval: int = 0):
        """
        Set up the hub.

        Args:
            max_pending: Outbox size for each stream client. A client that
                falls this far behind gets dropped.
            sweep_interval: Seconds between liveness sweeps. 0 = no sweeping
                (only prune during broadcasts). The sweep only starts once
                start() is called from a running event loop.
        """
        self.registry = SubscriberRegistry()
        self.mediator = BroadcastMediator(self.registry)
        self.state = SelectionState(on_change=self._broadcast_selection)
        self.max_pending = max_pending
        self.sweep_interval = sweep_interval
        self.scheduler: Optional[AsyncIOScheduler] = None

    # =========================================================================
    # STARTUP / SHUTDOWN
    # =========================================================================

    def start(self):
        """Start the periodic liveness sweep (if enabled)."""
        if self.sweep_interval <= 0 or self.scheduler is not None:
            return
        self.scheduler = AsyncIOScheduler()
        # Async job so it runs on the event loop, not in a worker thread
        self.scheduler.add_job(
            self._sweep_job,
            trigger=IntervalTrigger(seconds=self.sweep_interval),
            id=self.SWEEP_JOB_ID,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Subscriber sweep every {self.sweep_interval}s")

    def shutdown(self):
        """Stop the sweep and close every connected subscriber."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None

        subscribers = self.registry.clear()
        for subscriber in subscribers:
            try:
                subscriber.close()
            except Exception as e:
                logger.warning(f"Error closing subscriber {subscriber.id}: {e}")
        logger.info(f"Closed {len(subscribers)} subscriber(s)")

    # =========================================================================
    # INGRESS OPERATIONS
    # =========================================================================

    def set_selection(self, sensor: str) -> str:
        """Select `sensor` and tell every subscriber about it."""
        accepted = self.state.set(sensor)
        logger.info(f"Sensor updated to: {accepted}")
        return accepted

    def get_selection(self) -> str:
        return self.state.get()

    def report_reading(self, sensor: str, value: Any) -> ReadingReported:
        """Timestamp a reading and broadcast it. The value is passed through untouched."""
        event = ReadingReported(sensor=sensor, value=value)
        logger.info(f"Data -> Sensor: {sensor}, Value: {value}")
        self.mediator.publish(event)
        return event

    def status(self) -> StatusResponse:
        return StatusResponse(
            selection=self.state.get(),
            subscriber_count=len(self.registry),
            timestamp=datetime.now(timezone.utc),
        )

    def sweep(self) -> int:
        return self.mediator.sweep()

    # =========================================================================
    # STREAM LIFECYCLE
    # =========================================================================

    def connect(self, subscriber: Subscriber) -> bool:
        """
        Register a new stream client and greet it with the current selection.

        Returns False if the greeting couldn't be delivered (the subscriber is
        already removed in that case).
        """
        # Hold the selection steady so the greeting can't be older than a
        # SENSOR_UPDATE broadcast the new client might also receive.
        admitted = self.state.read_locked(
            lambda sensor: self.mediator.admit(subscriber, SelectionChanged(sensor=sensor))
        )

        if admitted:
            logger.info(f"WebSocket client connected: {subscriber!r} ({len(self.registry)} total)")
        else:
            logger.warning(f"WebSocket client {subscriber!r} dropped before greeting")
        return admitted

    def handle_message(self, subscriber: Subscriber, raw: str | bytes) -> bool:
        """
        Handle something a stream client sent us.

        A valid SENSOR_UPDATE changes the selection exactly like POST
        /set-sensor does (and is broadcast to everyone, the sender included).
        Anything else gets logged and ignored. Returns True if it was applied.
        """
        logger.info(f"WebSocket -> {raw!r:.200}")

        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning(f"Ignoring non UTF-8 message from {subscriber!r}")
                return False

        try:
            message = json.loads(raw)
        except (ValueError, RecursionError) as e:
            # RecursionError = nested too deep for the decoder
            logger.warning(f"Ignoring malformed message from {subscriber!r}: {e!r:.200}")
            return False

        if not isinstance(message, dict) or message.get("type") != EventType.SENSOR_UPDATE.value:
            logger.warning(f"Ignoring unrecognized message from {subscriber!r}")
            return False

        try:
            update = SelectionUpdateMessage.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid SENSOR_UPDATE from {subscriber!r}: {e.errors()}")
            return False

        self.set_selection(update.sensor)
        return True

    def disconnect(self, subscriber: Subscriber):
        """Forget a stream client. Safe to call more than once."""
        if self.mediator.remove(subscriber):
            logger.info(f"WebSocket client disconnected: {subscriber!r} ({len(self.registry)} left)")

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _sweep_job(self):
        self.sweep()

    def _broadcast_selection(self, sensor: str):
        self.mediator.publish(SelectionChanged(sensor=sensor))
