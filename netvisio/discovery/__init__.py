"""Device discovery subpackage.

Turns an IP range (heuristic HTTP probing) or pasted ``arp -a`` text into a
flat device list, and repairs any such list into a single rooted tree.
Generates Mermaid flowchart diagrams or JSON output.
"""

from netvisio.discovery.mermaid import MermaidGenerator
from netvisio.discovery.models import (
    Device,
    DeviceKind,
    DeviceState,
    OptimizationResult,
    ProbeOutcome,
    ProbeResult,
    WanHop,
)
from netvisio.discovery.parser import parse_arp_text
from netvisio.discovery.prober import HostProber, splice_device
from netvisio.discovery.topology import link_scan_results, link_to_root, sanitize_topology
from netvisio.discovery.transport import HttpProbeTransport, ProbeTransport

__all__ = [
    "HostProber",
    "HttpProbeTransport",
    "ProbeTransport",
    "MermaidGenerator",
    "parse_arp_text",
    "sanitize_topology",
    "link_to_root",
    "link_scan_results",
    "splice_device",
    "Device",
    "DeviceKind",
    "DeviceState",
    "OptimizationResult",
    "ProbeOutcome",
    "ProbeResult",
    "WanHop",
]
