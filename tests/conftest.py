"""Shared fixtures for the netvisio test suite."""

from __future__ import annotations

import threading

import pytest

from netvisio.discovery.models import Device, DeviceKind, ProbeOutcome, ProbeResult
from netvisio.discovery.transport import ProbeTransport


class FakeTransport(ProbeTransport):
    """Answers for a fixed set of host suffixes; everything else times out."""

    def __init__(self, responding=(), refusing=(), elapsed_ms: float = 12.0):
        self.responding = set(responding)
        self.refusing = set(refusing)
        self.elapsed_ms = elapsed_ms
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def probe(self, address: str, timeout: float) -> ProbeResult:
        with self._lock:
            self.calls.append(address)
        suffix = int(address.rsplit(".", 1)[1])
        if suffix in self.responding:
            return ProbeResult(address=address, outcome=ProbeOutcome.RESPONDED, elapsed_ms=self.elapsed_ms)
        if suffix in self.refusing:
            return ProbeResult(address=address, outcome=ProbeOutcome.REFUSED, elapsed_ms=1.0)
        return ProbeResult(address=address, outcome=ProbeOutcome.TIMEOUT, elapsed_ms=timeout * 1000)


@pytest.fixture()
def fake_transport():
    """Factory fixture returning a FakeTransport."""

    def _make(responding=(), refusing=(), elapsed_ms: float = 12.0):
        return FakeTransport(responding=responding, refusing=refusing, elapsed_ms=elapsed_ms)

    return _make


@pytest.fixture()
def make_device():
    """Factory fixture returning a Device with customizable fields."""

    def _make(id: str, parent_id: str | None = None, kind: DeviceKind = DeviceKind.PC, **kwargs):
        defaults = {
            "id": id,
            "address": "10.0.0.10",
            "display_name": id,
            "kind": kind,
            "parent_id": parent_id,
        }
        defaults.update(kwargs)
        return Device(**defaults)

    return _make


def assert_single_rooted_tree(devices: list[Device]) -> None:
    """Exactly one root, no dangling parents, no cycles."""
    ids = {d.id for d in devices}
    assert len(ids) == len(devices)
    roots = [d for d in devices if d.parent_id is None]
    assert len(roots) == 1
    parent_of = {d.id: d.parent_id for d in devices}
    for d in devices:
        assert d.parent_id is None or d.parent_id in ids
        seen = set()
        node = d.id
        while node is not None:
            assert node not in seen, f"cycle through {node}"
            seen.add(node)
            node = parent_of[node]


@pytest.fixture()
def assert_tree():
    """Fixture exposing the rooted-tree invariant check."""
    return assert_single_rooted_tree
