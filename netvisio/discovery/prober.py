"""HostProber — heuristic subnet discovery via bounded, batched HTTP probes."""

from __future__ import annotations

import concurrent.futures
import math
import threading
from typing import Callable, TypeVar

from loguru import logger

from netvisio.config import ProberConfig
from netvisio.discovery._util import _host_suffix, _is_probeable, _validate_ip, _validate_prefix
from netvisio.discovery.models import Device, DeviceKind, DeviceState, ProbeOutcome, ProbeResult
from netvisio.discovery.topology import link_scan_results
from netvisio.discovery.transport import HttpProbeTransport, ProbeTransport
from netvisio.exceptions import RemoteCallError
from netvisio.retry import call_with_retry

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]

AUTO_ID_PREFIX = "auto-"
DEADLINE_GRACE = 0.25  # seconds on top of the probe timeout before a probe is abandoned


def _classify_suffix(suffix: int) -> DeviceKind:
    """Guess a device kind from the host part of the address alone."""
    if suffix in (1, 254):
        return DeviceKind.ROUTER
    if suffix > 200:
        return DeviceKind.MOBILE  # DHCP pools tend to hand high addresses to Wi-Fi clients
    if suffix < 10:
        return DeviceKind.SERVER
    return DeviceKind.PC


def _device_from_probe(ip: str, latency_ms: float) -> Device:
    suffix = _host_suffix(ip)
    kind = _classify_suffix(suffix)
    return Device(
        id=f"{AUTO_ID_PREFIX}{ip}",
        address=ip,
        hardware_address=f"00:11:22:33:44:{suffix:02X}",
        display_name="Gateway / Router" if kind == DeviceKind.ROUTER else f"Device {ip}",
        vendor="Generic",
        kind=kind,
        state=DeviceState.ONLINE,
        latency_ms=latency_ms,
    )


class HostProber:
    """Scan an IPv4 /24 for hosts that answer (or refuse) an HTTP probe.

    Presence is inferred from timing alone: a response or a fast refusal
    means a host is there, a timeout means nobody is. A fast failure caused
    by something unrelated to the host (local proxy or DNS trouble) is
    indistinguishable from a refusal; that is a known accuracy limit of
    probing without raw sockets.

    A batch never waits longer than the probe timeout (times the retry
    budget) plus ``DEADLINE_GRACE``; a probe still running then counts as
    absent, even if the peer keeps the connection alive by trickling bytes.
    """

    def __init__(self, config: ProberConfig | None = None, transport: ProbeTransport | None = None):
        self.config = config or ProberConfig()
        self.transport = transport or HttpProbeTransport()

    def _probe(self, ip: str) -> ProbeResult:
        return call_with_retry(
            lambda: self.transport.probe(ip, self.config.timeout),
            policy=self.config.probe_retry,
        )

    def _latency_for(self, result: ProbeResult) -> float | None:
        """Latency for a present host, None when absent."""
        if result.outcome == ProbeOutcome.RESPONDED:
            return float(round(result.elapsed_ms))
        if result.outcome == ProbeOutcome.REFUSED:
            return self.config.refused_latency_ms
        return None

    def _probe_latency(self, ip: str) -> float | None:
        try:
            result = self._probe(ip)
        except RemoteCallError as e:
            logger.debug(f"{ip}: probe failed after retries, treating as absent: {e}")
            return None
        return self._latency_for(result)

    def _check_ip(self, ip: str) -> Device | None:
        latency = self._probe_latency(ip)
        if latency is None:
            return None
        return _device_from_probe(ip, latency)

    def _deadline(self) -> float:
        """Wall-clock budget for one batch: every attempt and backoff plus a grace period."""
        policy = self.config.probe_retry
        return self.config.timeout * policy.max_attempts + sum(policy.delays()) + DEADLINE_GRACE

    def _settle(self, func: Callable[[str], T], ips: list[str]) -> list[T | None]:
        """Run ``func`` on every address in parallel, waiting at most one deadline.

        Results keep the order of ``ips``; anything unfinished at the deadline
        is None. A fresh pool per batch keeps stalled probe threads from
        delaying the next batch.
        """
        deadline = self._deadline()
        pool = concurrent.futures.ThreadPoolExecutor(max_workers=len(ips))
        try:
            futures = [pool.submit(func, ip) for ip in ips]
            done, pending = concurrent.futures.wait(futures, timeout=deadline)
        finally:
            pool.shutdown(wait=False, cancel_futures=True)
        for ip, future in zip(ips, futures):
            if future in pending:
                logger.debug(f"{ip}: no answer within the {deadline:.2f}s deadline, treating as absent")
        return [future.result() if future in done else None for future in futures]

    def scan(
        self,
        prefix: str,
        on_progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> list[Device]:
        """Probe ``prefix`` + each suffix in the configured range.

        Args:
            prefix: Subnet prefix with trailing dot, e.g. ``"192.168.1."``.
            on_progress: Called after every batch with
                ``(percent_complete, cumulative_found)``.
            cancel: Checked at every batch boundary; when set, the scan stops
                and returns what it found so far.

        Returns:
            Devices with topology links attached (not yet sanitized).

        Raises:
            ValueError: If ``prefix`` is malformed.
        """
        _validate_prefix(prefix)
        cfg = self.config
        ips = [
            f"{prefix}{n}" for n in range(cfg.range_start, cfg.range_end + 1) if _is_probeable(f"{prefix}{n}")
        ]
        total = len(ips)
        width = cfg.concurrency
        logger.info(
            f"Probing {total} addresses in {prefix}0/24 "
            f"({width} parallel, {cfg.timeout}s timeout, {math.ceil(total / width) if total else 0} batches)"
        )

        found: list[Device] = []
        for i in range(0, total, width):
            if cancel is not None and cancel.is_set():
                logger.info(f"Scan cancelled after {i}/{total} addresses")
                break
            results = self._settle(self._check_ip, ips[i : i + width])
            found.extend(d for d in results if d is not None)

            done = min(i + width, total)
            if on_progress is not None:
                on_progress(round(done / total * 100), len(found))

        logger.info(f"Found {len(found)} responding hosts in {prefix}0/24")
        return link_scan_results(found, prefix, cfg.fanout_threshold)

    def refresh_device(self, device: Device) -> Device:
        """Re-probe one device and return an updated copy.

        The caller splices the copy into its list by ``id``
        (see :func:`splice_device`).
        """
        if not _validate_ip(device.address):
            raise ValueError(f"Invalid device address: {device.address!r}")
        latency = self._settle(self._probe_latency, [device.address])[0]
        update: dict[str, object] = {
            "state": DeviceState.OFFLINE if latency is None else DeviceState.ONLINE,
            "latency_ms": latency,
        }
        if device.id.startswith(AUTO_ID_PREFIX):
            update["kind"] = _classify_suffix(_host_suffix(device.address))
        logger.debug(f"{device.address}: refreshed -> {update['state']}")
        return device.model_copy(update=update)


def splice_device(devices: list[Device], updated: Device) -> list[Device]:
    """Return ``devices`` with the entry sharing ``updated.id`` replaced."""
    return [updated if d.id == updated.id else d for d in devices]
