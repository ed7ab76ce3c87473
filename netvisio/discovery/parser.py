"""Offline extraction of devices from pasted text such as ``arp -a`` output."""

from __future__ import annotations

import random
import re

from loguru import logger

from netvisio.discovery._util import _is_probeable
from netvisio.discovery.models import Device, DeviceKind, DeviceState
from netvisio.discovery.oui import lookup_vendor
from netvisio.discovery.topology import link_to_root

_IP_RE = re.compile(r"(?<![\d.])(\d{1,3}(?:\.\d{1,3}){3})(?![\d.])")
_MAC_RE = re.compile(r"(?<![0-9A-Fa-f])((?:[0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2})(?![0-9A-Fa-f])")


def _normalize_mac(mac: str) -> str:
    return mac.replace("-", ":").lower()


def parse_arp_text(
    text: str,
    oui_db: dict[str, str] | None = None,
    rng: random.Random | None = None,
) -> list[Device]:
    """Extract one device per line holding both an IPv4 and a MAC address.

    Handles Windows (``aa-bb-cc-dd-ee-ff``) and Unix (``aa:bb:cc:dd:ee:ff``)
    ``arp -a`` output as well as free-form text. Lines without a complete
    pair are skipped; multicast and ``.255`` addresses are rejected; the
    first occurrence of an address wins.

    The result already has a single root (first Router, else first device),
    but still needs :func:`sanitize_topology` like any other discovery path.
    """
    rng = rng or random.Random()
    devices: list[Device] = []
    seen: set[str] = set()

    for line in text.splitlines():
        ip_match = _IP_RE.search(line)
        mac_match = _MAC_RE.search(line)
        if not ip_match or not mac_match:
            continue

        ip = ip_match.group(1)
        if not _is_probeable(ip) or ip in seen:
            continue
        seen.add(ip)

        mac = _normalize_mac(mac_match.group(1))
        is_router = ip.endswith(".1") or ip.endswith(".254")
        vendor = lookup_vendor(mac, oui_db) if oui_db else ""
        devices.append(
            Device(
                id=f"arp-{ip}",
                address=ip,
                hardware_address=mac,
                display_name="Gateway" if is_router else f"Host {ip}",
                vendor=vendor or "Unknown",
                kind=DeviceKind.ROUTER if is_router else DeviceKind.PC,
                state=DeviceState.ONLINE,
                latency_ms=float(rng.randint(1, 20)),
            )
        )

    logger.info(f"Parsed {len(devices)} device(s) from {len(text.splitlines())} line(s) of text")
    return link_to_root(devices)
