"""Utility helpers for smoothlock."""

from __future__ import annotations

import socket

LOOPBACK_ADDRESS = "127.0.0.1"


def local_ip_address() -> str:
    """Return the address other hosts on the LAN would use to reach us.

    No packet is sent; connecting a UDP socket only selects a route.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.connect(("10.255.255.255", 1))
            return str(sock.getsockname()[0])
        except OSError:
            return LOOPBACK_ADDRESS


def listener_display_host(host: str) -> str:
    """Return a host suitable for showing in a URL for a bind address."""
    if host in ("", "0.0.0.0", "::"):
        return local_ip_address()
    return host
