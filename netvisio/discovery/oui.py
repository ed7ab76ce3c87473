"""OUI (Organizationally Unique Identifier) database loading and vendor lookup."""

from __future__ import annotations

import tempfile
from pathlib import Path

import requests
from loguru import logger

OUI_URL = "https://standards-oui.ieee.org/oui/oui.txt"
OUI_CACHE_PATH = Path(tempfile.gettempdir()) / "oui.txt"

# Shorten verbose OUI vendor names for labels
VENDOR_ABBREV: dict[str, str] = {
    "AVM Audiovisuelles Marketing und Computersysteme GmbH": "AVM",
    "Apple, Inc.": "Apple",
    "Cisco Systems, Inc": "Cisco",
    "Dell Inc.": "Dell",
    "Espressif Inc.": "Espressif",
    "Google, Inc.": "Google",
    "Hewlett Packard": "HP",
    "HP Inc.": "HP",
    "Intel Corporate": "Intel",
    "NETGEAR": "Netgear",
    "Raspberry Pi Trading Ltd": "Raspberry Pi",
    "Raspberry Pi (Trading) Ltd": "Raspberry Pi",
    "REALTEK SEMICONDUCTOR CORP.": "Realtek",
    "Samsung Electronics Co.,Ltd": "Samsung",
    "TP-LINK TECHNOLOGIES CO.,LTD.": "TP-Link",
    "Ubiquiti Inc": "Ubiquiti",
}


def _abbreviate_vendor(vendor: str) -> str:
    """Return abbreviated vendor name if available."""
    return VENDOR_ABBREV.get(vendor, vendor)


def load_oui_db(cache_path: Path = OUI_CACHE_PATH, timeout: float = 30.0) -> dict[str, str]:
    """Load IEEE OUI database, downloading if not cached.

    Best effort: any download or read failure yields an empty database.
    """
    oui_db: dict[str, str] = {}

    if not cache_path.exists():
        logger.info("Downloading OUI database...")
        try:
            resp = requests.get(OUI_URL, timeout=timeout)
            resp.raise_for_status()
            cache_path.write_bytes(resp.content)
        except (requests.RequestException, OSError) as e:
            logger.warning(f"Could not download OUI database: {e}")
            return oui_db

    try:
        with open(cache_path, encoding="utf-8", errors="replace") as f:
            for line in f:
                if "(hex)" in line:
                    parts = line.split("(hex)")
                    if len(parts) == 2:
                        prefix = parts[0].strip().replace("-", ":").upper()
                        oui_db[prefix] = parts[1].strip()
    except OSError:
        logger.warning("Could not read OUI database")

    return oui_db


def lookup_vendor(mac: str, oui_db: dict[str, str]) -> str:
    """Look up abbreviated vendor from MAC address using OUI prefix."""
    prefix = mac.upper().replace("-", ":")[:8]  # XX:XX:XX
    vendor = oui_db.get(prefix, "")
    return _abbreviate_vendor(vendor) if vendor else ""
