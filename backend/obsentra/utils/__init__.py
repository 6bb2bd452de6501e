"""
Utility modules for the sensor relay backend.
"""

from obsentra.utils.network import get_local_ip

__all__ = [
    "get_local_ip",
]
