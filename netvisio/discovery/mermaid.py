"""Mermaid flowchart export of a sanitized device tree."""

from __future__ import annotations

from loguru import logger

from netvisio.discovery.models import Device, DeviceKind, DeviceState
from netvisio.discovery.topology import children_of, find_root, sanitize_topology

# classDef styles per device kind
_KIND_STYLES: dict[DeviceKind, str] = {
    DeviceKind.ROUTER: "fill:#7f1d1d,stroke:#f87171,color:#fff",
    DeviceKind.SWITCH: "fill:#1e3a8a,stroke:#60a5fa,color:#fff",
    DeviceKind.SERVER: "fill:#4c1d95,stroke:#c084fc,color:#fff",
    DeviceKind.PRINTER: "fill:#7c2d12,stroke:#fb923c,color:#fff",
    DeviceKind.MOBILE: "fill:#14532d,stroke:#4ade80,color:#fff",
    DeviceKind.PC: "fill:#1e293b,stroke:#94a3b8,color:#fff",
    DeviceKind.IOT: "fill:#134e4a,stroke:#2dd4bf,color:#fff",
    DeviceKind.CLOUD: "fill:#312e81,stroke:#818cf8,color:#fff",
}


class MermaidGenerator:
    DIRECTIONS = ("TD", "LR")

    def __init__(self, devices: list[Device], direction: str = "TD", fenced: bool = True):
        self.devices = sanitize_topology(devices)
        self.direction = direction if direction in self.DIRECTIONS else "TD"
        self.fenced = fenced
        self._id_counter = 0
        self._node_ids: dict[str, str] = {}

    def _next_id(self, prefix: str = "n") -> str:
        self._id_counter += 1
        return f"{prefix}{self._id_counter}"

    def _sanitize(self, text: str) -> str:
        """Sanitize text for Mermaid labels."""
        return text.replace('"', "'").replace("<", "&lt;").replace(">", "&gt;")

    def _device_label(self, device: Device) -> str:
        parts = [self._sanitize(device.display_name or device.address), device.address]
        if device.vendor and device.vendor not in ("Unknown", "Generic"):
            parts.append(self._sanitize(device.vendor))
        if device.latency_ms is not None:
            parts.append(f"{device.latency_ms:g} ms")
        if device.state != DeviceState.ONLINE:
            parts.append(device.state.value.upper())
        return "<br/>".join(parts)

    def _emit(self, device: Device, lines: list[str]) -> None:
        node_id = self._next_id()
        self._node_ids[device.id] = node_id
        lines.append(f'    {node_id}["{self._device_label(device)}"]:::{device.kind.value.lower()}')
        for child in children_of(self.devices, device.id):
            self._emit(child, lines)
            lines.append(f"    {node_id} --> {self._node_ids[child.id]}")

    def generate(self) -> str:
        """Generate the flowchart, parents before children."""
        self._id_counter = 0
        self._node_ids = {}
        lines: list[str] = [f"flowchart {self.direction}"]
        root = find_root(self.devices)
        if root is not None:
            self._emit(root, lines)
        for kind in DeviceKind:
            lines.append(f"    classDef {kind.value.lower()} {_KIND_STYLES[kind]}")
        logger.debug(f"Mermaid diagram: {len(self.devices)} nodes, direction {self.direction}")

        body = "\n".join(lines)
        return "```mermaid\n" + body + "\n```" if self.fenced else body
