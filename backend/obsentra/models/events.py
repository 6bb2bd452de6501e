"""
Event Models
============
Pydantic models for everything that travels over the live stream.

WHAT'S AN EVENT?
---------------
Every time something interesting happens (someone picks a new sensor, or an
ESP32 reports a reading) we build ONE event object, turn it into JSON ONE time,
and hand that JSON string to every connected subscriber.

WIRE FORMAT:
-----------
The JSON shape is shared with the ESP32 firmware and the dashboard, so don't
rename these fields!

    {"type": "SENSOR_UPDATE", "sensor": "temp"}
    {"type": "SENSOR_DATA", "sensor": "temp", "value": 21.5,
     "timestamp": "2026-01-01T12:00:00Z"}

Clients can also SEND a SENSOR_UPDATE over the stream to change the selection.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# CONSTANTS
# =============================================================================

# What get() returns before anyone has picked a sensor
NO_SELECTION = "NONE"


class EventType(str, Enum):
    """Discriminant values for the `type` field on the wire."""
    SENSOR_UPDATE = "SENSOR_UPDATE"
    SENSOR_DATA = "SENSOR_DATA"


# =============================================================================
# OUTBOUND EVENTS - What subscribers receive
# =============================================================================

class SelectionChanged(BaseModel):
    """
    The active sensor changed (or a new subscriber is being told what it is).

    Example:
        {"type": "SENSOR_UPDATE", "sensor": "humidity"}
    """
    model_config = ConfigDict(frozen=True)

    type: Literal["SENSOR_UPDATE"] = EventType.SENSOR_UPDATE.value
    sensor: str

    def to_wire(self) -> str:
        return self.model_dump_json()


class ReadingReported(BaseModel):
    """
    A sensor reading reported by a producer.

    The timestamp is assigned by the server when the reading arrives, the
    device doesn't send one.
    """
    model_config = ConfigDict(frozen=True)

    type: Literal["SENSOR_DATA"] = EventType.SENSOR_DATA.value
    sensor: str
    value: Any
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_wire(self) -> str:
        return self.model_dump_json()


Event = Union[SelectionChanged, ReadingReported]


# =============================================================================
# INBOUND MESSAGES - What subscribers may send us
# =============================================================================

class SelectionUpdateMessage(BaseModel):
    """
    A selection change sent by a client over the stream.

    Same shape as SelectionChanged, but `type` is required here so random JSON
    doesn't get treated as a command. Unknown extra fields are ignored.
    """
    type: Literal["SENSOR_UPDATE"]
    sensor: str = Field(..., strict=True)
