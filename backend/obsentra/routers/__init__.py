"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .sensor_relay import router as relay_router, set_relay_hub, get_relay_hub
from .stream import router as stream_router

__all__ = [
    "relay_router",
    "stream_router",
    "set_relay_hub",
    "get_relay_hub",
]
