"""Prompt templates and response schemas for the Gemini assistant."""

from __future__ import annotations

from typing import Any

from netvisio.discovery.models import DeviceKind, DeviceState

DEVICE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "id": {"type": "STRING"},
        "ip": {"type": "STRING"},
        "mac": {"type": "STRING"},
        "name": {"type": "STRING"},
        "manufacturer": {"type": "STRING"},
        "type": {"type": "STRING", "enum": [k.value for k in DeviceKind]},
        "parentId": {"type": "STRING", "nullable": True},
        "status": {"type": "STRING", "enum": [s.value for s in DeviceState]},
        "latency": {"type": "NUMBER"},
    },
    "required": ["id", "ip", "type"],
}

DEVICE_LIST_SCHEMA: dict[str, Any] = {"type": "ARRAY", "items": DEVICE_SCHEMA}

HOP_LIST_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "hopNumber": {"type": "INTEGER"},
            "ip": {"type": "STRING"},
            "hostname": {"type": "STRING"},
            "latency": {"type": "NUMBER"},
            "location": {"type": "STRING"},
        },
        "required": ["hopNumber", "ip"],
    },
}

OPTIMIZE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "explanation": {"type": "STRING"},
        "topology": DEVICE_LIST_SCHEMA,
    },
    "required": ["explanation", "topology"],
}

GENERATE_PROMPT = """\
Generate a realistic JSON list of network devices for the LAN of a small or
medium business. Include exactly:
- 1 main gateway router (192.168.1.1)
- 2 core switches connected to the router
- 6-8 end devices (PCs, printers, servers) connected to the switches
- 2 mobile devices on Wi-Fi (treat them as connected to the router)

Use realistic MAC addresses, manufacturers (Cisco, Dell, HP, Apple) and
typical private IP addresses. The 'parentId' field must reference the 'id'
of the upstream device (switch or router). The router has parentId null.
Use descriptive names (e.g. "Accounting PC", "File Server").
"""

PARSE_PROMPT = """\
Extract the network devices from the following raw text (for example the
output of `arp -a`, a DHCP lease table or a router status page). Return a
JSON list. Guess each device type from its address, name or vendor. Link
every device to the gateway via 'parentId'; the gateway has parentId null.

Raw text:
{raw}
"""

ANALYZE_PROMPT = """\
Analyze the following network topology (JSON list of devices). Identify
potential bottlenecks, security risks (e.g. unknown devices) and
suggestions for improvement. Answer in concise, professional Markdown.

Network data:
{devices}
"""

TRACE_PROMPT = """\
Simulate a realistic WAN traceroute from a generic local ISP to the host
"{target}". Produce 8-12 hops. The first hop must be the local gateway
(192.168.1.1), intermediate hops should look like ISP backbone routers, and
the last hop is the target. Return JSON.
"""

OPTIMIZE_PROMPT = """\
You are a network architect. Propose an improved topology for the following
devices (JSON list): add or move switches where fan-out is too high, keep
every existing device and its 'id', and re-link devices via 'parentId'.
Return a JSON object with an 'explanation' (Markdown) and the full new
'topology' list.

Current topology:
{devices}
"""
