"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from obsentra.models import SelectionChanged, SetSensorRequest
"""

from .events import (
    # The "nothing selected yet" sentinel
    NO_SELECTION,
    EventType,

    # What subscribers receive
    Event,
    SelectionChanged,
    ReadingReported,

    # What subscribers may send
    SelectionUpdateMessage,
)
from .api import (
    # What devices send us
    SetSensorRequest,
    SensorDataRequest,

    # What we send back
    SetSensorResponse,
    SelectionResponse,
    DataAckResponse,
    StatusResponse,
)

__all__ = [
    "NO_SELECTION",
    "EventType",
    "Event",
    "SelectionChanged",
    "ReadingReported",
    "SelectionUpdateMessage",
    "SetSensorRequest",
    "SensorDataRequest",
    "SetSensorResponse",
    "SelectionResponse",
    "DataAckResponse",
    "StatusResponse",
]
