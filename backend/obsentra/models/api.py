"""
API Models
==========
Request and response bodies for the HTTP endpoints.

These mirror the JSON the ESP32 firmware already speaks, so the field names
stay exactly as the devices send them.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# REQUEST MODELS - What devices/frontends send to us
# =============================================================================

class SetSensorRequest(BaseModel):
    """
    Body for POST /set-sensor.

    Example Request:
        POST /set-sensor
        {"sensor": "temperature"}
    """
    sensor: str = Field(
        ...,
        strict=True,
        description="Identifier of the sensor to select (any string)",
        examples=["temperature", "humidity"]
    )


class SensorDataRequest(BaseModel):
    """
    Body for POST /sensor-data.

    `value` is relayed untouched, so numbers, strings and objects all work.

    Example Request:
        POST /sensor-data
        {"sensor": "temperature", "value": 21.5}
    """
    sensor: str = Field(..., strict=True, description="Sensor that produced the reading")
    value: Any = Field(..., description="Reading value, relayed as-is")


# =============================================================================
# RESPONSE MODELS - What we send back
# =============================================================================

class SetSensorResponse(BaseModel):
    message: str = "Sensor updated"
    sensor: str


class SelectionResponse(BaseModel):
    sensor: str


class DataAckResponse(BaseModel):
    message: str = "Data received"


class StatusResponse(BaseModel):
    """Introspection snapshot returned by GET /status."""
    selection: str
    subscriber_count: int
    timestamp: datetime
