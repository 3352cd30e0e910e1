from __future__ import annotations

from typing import Optional, Sequence, Tuple


def split_host_port(address: str) -> Optional[Tuple[str, int]]:
    """Split ``host:port`` or ``[ipv6]:port`` into its parts.

    Returns None when the address has no usable host or port.
    """

    if not isinstance(address, str):
        return None
    address = address.strip()
    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep or not rest.startswith(":"):
            return None
        port_text = rest[1:]
    else:
        host, sep, port_text = address.rpartition(":")
        if not sep or ":" in host:
            return None
    if not host or not (port_text.isascii() and port_text.isdigit()):
        return None
    port = int(port_text)
    if not (0 < port < 65_536):
        return None
    return host, port


def extract_ip(or_addresses: Optional[Sequence[str]]) -> Optional[str]:
    """Return the IP of the first OR address, or None if it is unusable."""

    if not or_addresses:
        return None
    parsed = split_host_port(or_addresses[0])
    if parsed is None:
        return None
    return parsed[0]
