"""Topology repair: root unification, virtual switch synthesis, sanitizer.

Every discovery path (prober, offline parser, AI assistant) produces a flat
device list with tentative ``parent_id`` links. ``sanitize_topology`` is the
single step that turns such a list into one rooted tree.
"""

from __future__ import annotations

from loguru import logger

from netvisio.discovery.models import Device, DeviceKind, DeviceState
from netvisio.exceptions import TopologyError

VIRTUAL_SWITCH_ID = "virt-switch"
DEFAULT_FANOUT_THRESHOLD = 6


def _elect_root(devices: list[Device]) -> Device:
    """First Router, else the first device."""
    return next((d for d in devices if d.kind == DeviceKind.ROUTER), devices[0])


def link_to_root(devices: list[Device]) -> list[Device]:
    """Parent every device to the elected root.

    The root is the first Router, or the first device when there is none; it
    gets ``parent_id=None``.
    """
    if not devices:
        return []
    root = _elect_root(devices)
    return [
        d.model_copy(update={"parent_id": None if d.id == root.id else root.id}) for d in devices
    ]


def _virtual_switch_address(prefix: str, taken: set[str]) -> str:
    """Lowest free host address in ``prefix`` 2..253 for the synthetic switch."""
    for suffix in range(2, 254):
        candidate = f"{prefix}{suffix}"
        if candidate not in taken:
            return candidate
    # every address is taken; fall back to the network address
    return f"{prefix}0"


def link_scan_results(
    devices: list[Device],
    prefix: str,
    fanout_threshold: int = DEFAULT_FANOUT_THRESHOLD,
) -> list[Device]:
    """Attach topology links to the hosts found by a subnet scan.

    With more than ``fanout_threshold`` hosts, a virtual Switch is
    synthesized under the root and every other host hangs off it.
    Otherwise every host is parented directly to the root.
    """
    if len(devices) <= max(fanout_threshold, 2):
        return link_to_root(devices)

    root = _elect_root(devices)
    address = _virtual_switch_address(prefix, {d.address for d in devices})
    switch = Device(
        id=VIRTUAL_SWITCH_ID,
        address=address,
        hardware_address="02:00:00:00:00:01",
        display_name="Main Switch",
        vendor="Virtual Switch",
        kind=DeviceKind.SWITCH,
        parent_id=root.id,
        state=DeviceState.ONLINE,
        latency_ms=1.0,
    )
    logger.debug(f"{len(devices)} hosts exceed fan-out threshold {fanout_threshold}, adding virtual switch at {address}")
    linked = [
        d.model_copy(update={"parent_id": None if d.id == root.id else VIRTUAL_SWITCH_ID}) for d in devices
    ]
    linked.append(switch)
    return linked


def sanitize_topology(devices: list[Device]) -> list[Device]:
    """Repair a parent-pointer graph into a single rooted tree.

    - dangling ``parent_id`` references are demoted to candidate roots
    - with several candidate roots, the first Router (else the first
      candidate) becomes the root and the others are attached to it
    - cycles are broken at the device that closes them; it is attached to
      the root like any other candidate root

    Only ``parent_id`` is ever changed and the input order is kept. The
    output is a fixed point: sanitizing it again changes nothing.

    Raises:
        TopologyError: On duplicate ids, or when a non-empty input has no
            candidate root at all (fully cyclic or fully linked).
    """
    if not devices:
        return []

    index: dict[str, int] = {}
    for i, device in enumerate(devices):
        if device.id in index:
            raise TopologyError(f"Duplicate device id: {device.id!r}")
        index[device.id] = i

    # Arena of parent indices; None marks a candidate root
    parents: list[int | None] = []
    for device in devices:
        parent = index.get(device.parent_id) if device.parent_id is not None else None
        if device.parent_id is not None and parent is None:
            logger.debug(f"{device.id}: dangling parent {device.parent_id!r}, treating as root")
        parents.append(parent)

    candidates = [i for i, p in enumerate(parents) if p is None]
    if not candidates:
        raise TopologyError("Topology has no root: every device has a parent (cyclic data)")

    primary = next((i for i in candidates if devices[i].kind == DeviceKind.ROUTER), candidates[0])

    # Walk upward from every node; a node revisited on the current path closes a cycle
    settled: set[int] = set(candidates)
    for start in range(len(devices)):
        path: list[int] = []
        on_path: set[int] = set()
        node: int | None = start
        while node is not None and node not in settled:
            if node in on_path:
                logger.warning(f"{devices[node].id}: parent cycle detected, detaching")
                parents[node] = None
                break
            path.append(node)
            on_path.add(node)
            node = parents[node]
        settled.update(path)

    result: list[Device] = []
    for i, device in enumerate(devices):
        if i == primary:
            parent_id = None
        elif parents[i] is None:
            parent_id = devices[primary].id
        else:
            parent_id = devices[parents[i]].id  # type: ignore[index]
        if parent_id != device.parent_id:
            device = device.model_copy(update={"parent_id": parent_id})
        result.append(device)
    return result


def find_root(devices: list[Device]) -> Device | None:
    """Return the device without a parent in a sanitized tree."""
    return next((d for d in devices if d.parent_id is None), None)


def children_of(devices: list[Device], device_id: str) -> list[Device]:
    """Direct children of ``device_id`` in input order."""
    return [d for d in devices if d.parent_id == device_id]
