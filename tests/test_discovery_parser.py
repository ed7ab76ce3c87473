"""Tests for netvisio/discovery/parser.py"""

import random

from netvisio.discovery.models import DeviceKind, DeviceState
from netvisio.discovery.parser import parse_arp_text
from netvisio.discovery.topology import sanitize_topology

SAMPLE = "192.168.1.1 aa-bb-cc-dd-ee-ff dynamic\n192.168.1.50 11:22:33:44:55:66 static"

WINDOWS_ARP = """
Interface: 192.168.1.23 --- 0x7
  Internet Address      Physical Address      Type
  192.168.1.1           b0-be-76-12-34-56     dynamic
  192.168.1.42          dc-a6-32-ab-cd-ef     dynamic
  192.168.1.255         ff-ff-ff-ff-ff-ff     static
  224.0.0.22            01-00-5e-00-00-16     static
"""

LINUX_ARP = """
? (10.0.0.1) at 00:1a:2b:3c:4d:5e [ether] on eth0
? (10.0.0.77) at 3c:22:fb:00:11:22 [ether] on eth0
? (10.0.0.99) at <incomplete> on eth0
"""


class TestParseArpText:
    """Tests for parse_arp_text."""

    def test_sample_yields_two_devices(self, assert_tree):
        """Windows and Unix MAC notations on consecutive lines."""
        devices = parse_arp_text(SAMPLE)

        assert len(devices) == 2
        gw, host = devices
        assert gw.address == "192.168.1.1"
        assert gw.kind == DeviceKind.ROUTER
        assert gw.hardware_address == "aa:bb:cc:dd:ee:ff"
        assert host.kind == DeviceKind.PC
        assert host.hardware_address == "11:22:33:44:55:66"
        assert host.parent_id == gw.id
        assert_tree(devices)

    def test_ip_without_mac_is_skipped(self):
        """A line with an address but no MAC contributes nothing."""
        assert parse_arp_text("192.168.1.20 <incomplete>") == []

    def test_empty_input(self):
        """Nothing in, nothing out."""
        assert parse_arp_text("") == []
        assert parse_arp_text("\n\n  \n") == []

    def test_windows_arp_output(self):
        """Broadcast and multicast entries are filtered."""
        devices = parse_arp_text(WINDOWS_ARP)

        assert [d.address for d in devices] == ["192.168.1.1", "192.168.1.42"]
        assert all(d.id == f"arp-{d.address}" for d in devices)

    def test_linux_arp_output(self):
        """Incomplete entries without a MAC are skipped."""
        devices = parse_arp_text(LINUX_ARP)

        assert [d.address for d in devices] == ["10.0.0.1", "10.0.0.77"]
        assert devices[0].kind == DeviceKind.ROUTER

    def test_multicast_and_broadcast_rejected(self):
        """224.0.0.5 and x.x.x.255 never become devices."""
        text = "224.0.0.5 01-00-5e-00-00-05\n192.168.1.255 ff:ff:ff:ff:ff:ff"

        assert parse_arp_text(text) == []

    def test_first_occurrence_wins(self):
        """Repeated addresses are deduplicated."""
        text = "192.168.1.9 aa:aa:aa:aa:aa:aa\n192.168.1.9 bb:bb:bb:bb:bb:bb"

        devices = parse_arp_text(text)

        assert len(devices) == 1
        assert devices[0].hardware_address == "aa:aa:aa:aa:aa:aa"

    def test_dot_254_is_router(self):
        """.254 is treated as a gateway address as well."""
        devices = parse_arp_text("10.1.1.254 00:00:00:00:00:01")

        assert devices[0].kind == DeviceKind.ROUTER
        assert devices[0].display_name == "Gateway"

    def test_latency_is_placeholder_in_range(self):
        """Latency is a plausible placeholder, reproducible with a seeded rng."""
        first = parse_arp_text(SAMPLE, rng=random.Random(7))
        second = parse_arp_text(SAMPLE, rng=random.Random(7))

        assert [d.latency_ms for d in first] == [d.latency_ms for d in second]
        assert all(1 <= d.latency_ms <= 20 for d in first)
        assert all(d.state == DeviceState.ONLINE for d in first)

    def test_vendor_from_oui_db(self):
        """Vendors resolve through the OUI database when one is given."""
        oui_db = {"AA:BB:CC": "NETGEAR"}

        devices = parse_arp_text(SAMPLE, oui_db=oui_db)

        assert devices[0].vendor == "Netgear"
        assert devices[1].vendor == "Unknown"

    def test_no_router_promotes_first_device(self):
        """Without a gateway address the first device is the root."""
        devices = parse_arp_text("10.0.0.5 00:00:00:00:00:05\n10.0.0.6 00:00:00:00:00:06")

        assert devices[0].parent_id is None
        assert devices[1].parent_id == devices[0].id

    def test_output_is_sanitizer_fixed_point(self):
        """Parser output needs no structural repair."""
        devices = parse_arp_text(WINDOWS_ARP + LINUX_ARP)

        assert sanitize_topology(devices) == devices
