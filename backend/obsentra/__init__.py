"""
Obsentra Sensor Relay Backend
=============================

This is the Python package for the relay server.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does an event look like on the wire?)
- services/  = Workers (selection, subscriber registry, broadcaster)
- routers/   = API endpoints (HTTP for devices, WebSocket for dashboards)
- utils/     = Small helpers (finding our LAN address)
- main.py    = Puts it all together and starts the server
"""

__version__ = "1.0.0"
