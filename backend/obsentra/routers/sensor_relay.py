"""
Sensor Relay API Router
=======================

The HTTP doors into the relay.

WHO CALLS THESE?
---------------
- The ESP32 boards POST their readings to /sensor-data and ask
  /get-sensor which sensor they should be reading.
- The dashboard (or anything else) POSTs /set-sensor to pick a sensor.

Every change is pushed straight out to everyone on the live stream.

ALL ENDPOINTS:
-------------
POST   /set-sensor   - Select a sensor (broadcasts SENSOR_UPDATE)
GET    /get-sensor   - Which sensor is selected right now?
POST   /sensor-data  - Report a reading (broadcasts SENSOR_DATA)
GET    /status       - Selection + how many stream clients are connected

The paths match what the ESP32 firmware already uses, so don't move them.
"""

from fastapi import APIRouter, Depends, HTTPException

from obsentra.models import (
    SetSensorRequest,
    SensorDataRequest,
    SetSensorResponse,
    SelectionResponse,
    DataAckResponse,
    StatusResponse,
)


router = APIRouter(tags=["relay"])


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================
# Gives the endpoints access to the RelayHub created at startup

_relay_hub = None  # This gets set when the app starts


def set_relay_hub(hub):
    """Called when the app starts to hand the routers their hub."""
    global _relay_hub
    _relay_hub = hub


def get_relay_hub():
    """
    Get the relay hub for use in endpoints.

    Every endpoint (HTTP and WebSocket) that needs the hub uses this.
    """
    if _relay_hub is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _relay_hub


# =============================================================================
# SELECTION ENDPOINTS
# =============================================================================

@router.post("/set-sensor", response_model=SetSensorResponse)
async def set_sensor(
    request: SetSensorRequest,
    hub = Depends(get_relay_hub)
):
    """
    Select the active sensor.

    Send us:
    - sensor: Any sensor name (like "temperature")

    Everyone on the live stream gets a SENSOR_UPDATE right away.
    """
    sensor = hub.set_selection(request.sensor)
    return SetSensorResponse(sensor=sensor)


@router.get("/get-sensor", response_model=SelectionResponse)
async def get_sensor(hub = Depends(get_relay_hub)):
    """Get the active sensor ("NONE" if nobody picked one yet)."""
    return SelectionResponse(sensor=hub.get_selection())


# =============================================================================
# DATA ENDPOINTS
# =============================================================================

@router.post("/sensor-data", response_model=DataAckResponse)
async def report_sensor_data(
    request: SensorDataRequest,
    hub = Depends(get_relay_hub)
):
    """
    Report a sensor reading.

    Send us:
    - sensor: Which sensor this came from
    - value: The reading (number, string, whatever the device has)

    We stamp it with the server time and push it to the live stream.
    Nothing is stored.
    """
    hub.report_reading(request.sensor, request.value)
    return DataAckResponse()


@router.get("/status", response_model=StatusResponse)
async def relay_status(hub = Depends(get_relay_hub)):
    """Current selection and the number of connected stream clients."""
    return hub.status()
