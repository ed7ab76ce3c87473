"""Shared helper functions for topology discovery."""

from __future__ import annotations

import ipaddress
import re

_PREFIX_RE = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.$")


def _validate_ip(ip: str) -> bool:
    """Validate IPv4 address string."""
    try:
        ipaddress.IPv4Address(ip)
        return True
    except ValueError:
        return False


def _is_probeable(ip: str) -> bool:
    """False for multicast (224.0.0.0/4) and limited-broadcast (x.x.x.255) addresses."""
    if not _validate_ip(ip):
        return False
    return not (ipaddress.IPv4Address(ip).is_multicast or ip.endswith(".255"))


def _validate_prefix(prefix: str) -> str:
    """Validate a subnet prefix like ``192.168.1.`` and return it unchanged.

    Raises:
        ValueError: If the prefix is not three dotted octets followed by a dot.
    """
    # ipaddress rejects octets above 255 and leading zeros ("010.")
    if not _PREFIX_RE.match(prefix) or not _validate_ip(f"{prefix}0"):
        raise ValueError(f"Invalid subnet prefix: {prefix!r} (expected e.g. '192.168.1.')")
    return prefix


def _host_suffix(ip: str) -> int:
    """Return the last octet of a dotted-quad address."""
    return int(ip.rsplit(".", 1)[1])
