"""
Subscriber Interface
====================

Everything the registry and broadcaster need to know about a connection.

The broadcaster never touches sockets directly. It only asks three questions:
- is_open(): is this connection still alive?
- send(payload): try to deliver this JSON string (True = accepted)
- close(): we're done with you

That way the same broadcast logic works for WebSockets, test fakes, or any
other transport someone plugs in later.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Subscriber(Protocol):
    """A live streaming connection that can receive broadcast events."""

    id: str

    def is_open(self) -> bool:
        ...

    def send(self, payload: str) -> bool:
        """Queue `payload` for delivery without blocking. False means it failed."""
        ...

    def close(self) -> None:
        ...
