"""
Services Package
================

These are the "workers" that do the actual work.

- SelectionState: Remembers which sensor is selected
- SubscriberRegistry: Keeps track of who's connected to the live stream
- BroadcastMediator: Sends one event to everyone, drops dead connections
- WebSocketSubscriber: Plugs a WebSocket into the broadcaster
- RelayHub: The boss that ties all of the above together
"""

from .subscriber import Subscriber
from .selection_state import SelectionState
from .subscriber_registry import SubscriberRegistry
from .broadcast import BroadcastMediator
from .websocket_subscriber import WebSocketSubscriber
from .relay_hub import RelayHub

__all__ = [
    "Subscriber",
    "SelectionState",
    "SubscriberRegistry",
    "BroadcastMediator",
    "WebSocketSubscriber",
    "RelayHub",
]
