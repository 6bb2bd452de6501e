"""
Obsentra Sensor Relay - Backend API
===================================
FastAPI application that relays sensor selections and readings between
ESP32 sensor boards and live dashboards.

ARCHITECTURE:
    The ESP32 boards talk plain HTTP. Dashboards hold a WebSocket open and
    get every change pushed to them the moment it happens.

    [ESP32] --POST /sensor-data--> [This Backend] --WebSocket--> [Dashboard]
    [ESP32] <--GET /get-sensor---- [This Backend] <--WebSocket-- [Dashboard]
                                         ^
    [Anyone] --POST /set-sensor----------+

    Nothing is stored. If nobody is connected, readings just go nowhere.

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config
    cp backend/env.example.txt .env
    # Edit .env with your settings

    # Run the server
    uvicorn obsentra.main:app --host 0.0.0.0 --port 3000
    # or simply
    python -m obsentra.main

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:3000/docs
    - ReDoc: http://localhost:3000/redoc
"""

import logging
import os
import sys
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from obsentra import __version__
from obsentra.routers import relay_router, stream_router, set_relay_hub
from obsentra.services import RelayHub
from obsentra.utils import get_local_ip


# Load environment variables from .env file
load_dotenv()


# =============================================================================
# CONFIGURATION
# =============================================================================

class Config:
    """
    Application configuration loaded from environment variables.

    Environment Variables:
        RELAY_HOST: Address to bind (default: 0.0.0.0)
        RELAY_PORT: Port to bind (default: 3000, what the firmware expects)
        CORS_ORIGINS: Comma-separated allowed origins (default: * = anyone)
        SUBSCRIBER_QUEUE_SIZE: Messages a slow client may fall behind before
            it gets dropped (default: 100)
        SWEEP_INTERVAL: Seconds between dead-connection sweeps, 0 = off
            (default: 30)
        LOG_LEVEL: Logging level (default: INFO)
    """

    HOST = os.getenv("RELAY_HOST", "0.0.0.0")
    PORT = int(os.getenv("RELAY_PORT", "3000"))

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    SUBSCRIBER_QUEUE_SIZE = int(os.getenv("SUBSCRIBER_QUEUE_SIZE", "100"))
    SWEEP_INTERVAL = int(os.getenv("SWEEP_INTERVAL", "30"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# =============================================================================
# LOGGING
# =============================================================================

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='[%(asctime)s] %(message)s',
    datefmt='%H:%M:%S',
    handlers=[logging.StreamHandler(sys.stderr)]
)
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    STARTUP:
        1. Create the RelayHub (selection + subscribers + broadcaster)
        2. Start the dead-connection sweep
        3. Inject the hub into the routers
        4. Print startup information

    SHUTDOWN:
        1. Stop the sweep
        2. Close every stream client
    """
    # ========== STARTUP ==========
    hub = RelayHub(
        max_pending=Config.SUBSCRIBER_QUEUE_SIZE,
        sweep_interval=Config.SWEEP_INTERVAL,
    )
    hub.start()
    set_relay_hub(hub)
    app.state.relay_hub = hub

    print("=" * 60)
    print("OBSENTRA SENSOR RELAY - Starting Backend")
    print("=" * 60)
    print(f"Server running at http://{get_local_ip()}:{Config.PORT}")
    print(f"   Live stream: ws://{get_local_ip()}:{Config.PORT}/ws")
    print(f"   Client outbox size: {Config.SUBSCRIBER_QUEUE_SIZE}")
    print(f"   Sweep interval: {Config.SWEEP_INTERVAL} seconds")
    print(f"   CORS origins: {', '.join(Config.CORS_ORIGINS)}")
    print("=" * 60)

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    print()
    print("Shutting down...")
    hub.shutdown()
    set_relay_hub(None)
    print("Shutdown complete")


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

app = FastAPI(
    title="Obsentra Sensor Relay API",
    description="""
## Overview

Relays sensor selections and readings from ESP32 boards to live dashboards.

## How It Works

1. **Pick a sensor** - `POST /set-sensor` (or send a `SENSOR_UPDATE` over the stream)
2. **Devices report** - `POST /sensor-data` with `{"sensor", "value"}`
3. **Dashboards watch** - connect to `/ws` and receive every event as JSON

## Stream Events

| type | fields |
|------|--------|
| `SENSOR_UPDATE` | `sensor` |
| `SENSOR_DATA` | `sensor`, `value`, `timestamp` |
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials="*" not in Config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

# Device + selection endpoints
app.include_router(relay_router)

# Live WebSocket stream
app.include_router(stream_router)


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get(
    "/",
    summary="API Information",
    description="Get basic API information and available endpoints."
)
async def root():
    """
    Root endpoint with API overview.

    Returns links to all available endpoints.
    """
    return {
        "name": "Obsentra Sensor Relay API",
        "version": __version__,
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json"
        },
        "endpoints": {
            "set_sensor": "POST /set-sensor",
            "get_sensor": "GET /get-sensor",
            "sensor_data": "POST /sensor-data",
            "status": "GET /status",
            "stream": "WS /ws"
        }
    }


@app.get(
    "/health",
    summary="Health Check",
    description="Check if the backend is running."
)
async def health():
    """Health check endpoint."""
    hub = getattr(app.state, "relay_hub", None)
    return {
        "status": "healthy",
        "subscribers": len(hub.registry) if hub is not None else 0,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=Config.HOST, port=Config.PORT)
