"""
Canonical form of the addresses used as sender / device identities.

The same address can reach the engine with different spellings
(socket address with a port, padded text, raw bytes, ipaddress objects).
Both the allow-list and the lookups go through normalize_identity(),
so that an authorized sender is never misclassified because of formatting.
"""

import ipaddress
import re
from typing import Any

from telemetry.errors import MalformedEventError

_MAC_RE = re.compile(r"^[0-9a-fA-F]{2}([:-])(?:[0-9a-fA-F]{2}\1){4}[0-9a-fA-F]{2}$")


def _canonical_ip(text: str):
    try:
        return str(ipaddress.ip_address(text))
    except ValueError:
        return None


def _strip_port(text: str):
    """host part of 'a.b.c.d:port' or '[v6]:port', None if text is not a socket address"""
    if text.startswith("["):
        host, sep, port = text[1:].partition("]:")
        if sep and port.isdigit():
            return host
        if text.endswith("]"):
            return text[1:-1]
        return None

    if text.count(":") == 1:
        host, port = text.split(":")
        if port.isdigit():
            return host
    return None


def normalize_identity(value: Any) -> str:
    """
    Returns the canonical text form of an identity.
    Raises MalformedEventError when the value cannot identify anything.
    """
    if value is None:
        raise MalformedEventError("missing identity")

    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return str(value)

    if isinstance(value, tuple):  # (host, port) socket address
        if not value:
            raise MalformedEventError("empty socket address")
        return normalize_identity(value[0])

    if isinstance(value, (bytes, bytearray)):
        if not value:
            raise MalformedEventError("empty identity")
        if len(value) in (4, 16):
            return str(ipaddress.ip_address(bytes(value)))
        return bytes(value).hex()  # link-layer address

    if isinstance(value, bool):
        raise MalformedEventError(f"invalid identity: {value!r}")

    if isinstance(value, int):
        return str(value)

    text = str(value).strip()
    if not text:
        raise MalformedEventError("empty identity")

    ip = _canonical_ip(text)
    if ip is not None:
        return ip

    host = _strip_port(text)
    if host is not None:
        ip = _canonical_ip(host)
        if ip is not None:
            return ip

    if _MAC_RE.match(text):
        return text.replace("-", ":").lower()

    return text.lower()
