"""
Network Helpers
===============

Figures out which address the ESP32 boards should use to reach us, so the
startup banner can print something you can paste into the firmware.
"""

import ipaddress
import socket


def get_local_ip() -> str:
    """
    Get this machine's LAN IPv4 address.

    Connecting a UDP socket doesn't send anything, it just makes the OS pick
    the outgoing interface, whose address we then read back.

    Returns:
        The first non-loopback IPv4 address, or "localhost" if there isn't one
    """
    candidates = []

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(("10.255.255.255", 1))
        candidates.append(sock.getsockname()[0])
    except OSError:
        pass
    finally:
        sock.close()

    try:
        candidates.extend(socket.gethostbyname_ex(socket.gethostname())[2])
    except OSError:
        pass

    for address in candidates:
        if is_external_ipv4(address):
            return address
    return "localhost"


def is_external_ipv4(address: str) -> bool:
    """
    Check whether `address` is an IPv4 address that isn't loopback.

    Args:
        address: IP address string (e.g., "192.168.1.100")

    Returns:
        True if it's usable from other machines on the network
    """
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return ip.version == 4 and not ip.is_loopback and not ip.is_unspecified
