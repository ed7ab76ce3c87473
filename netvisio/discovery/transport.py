"""Probe transports: one best-effort presence check per address."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod

import requests
from loguru import logger

from netvisio.discovery.models import ProbeOutcome, ProbeResult


class ProbeTransport(ABC):
    """Abstract base class for host probe transports.

    Implementations fold every network outcome into a ``ProbeResult`` and
    never raise for a silent or refusing host.
    """

    @abstractmethod
    def probe(self, address: str, timeout: float) -> ProbeResult:
        """Probe ``address`` with a hard deadline of ``timeout`` seconds."""


class HttpProbeTransport(ProbeTransport):
    """HEAD request to ``http://<address>``.

    Any HTTP answer means the host responded. A connection refused or reset
    before the deadline still means a TCP stack answered. Only a timeout
    marks the host absent.

    Probes run on pool threads. Without an explicit ``session`` every thread
    gets its own ``requests.Session``; a session passed in is shared by all
    threads and must be safe for that.
    """

    def __init__(self, session: requests.Session | None = None, port: int | None = None):
        self.session = session
        self.port = port
        self._local = threading.local()

    def _session(self) -> requests.Session:
        if self.session is not None:
            return self.session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def _url(self, address: str) -> str:
        return f"http://{address}:{self.port}" if self.port else f"http://{address}"

    def probe(self, address: str, timeout: float) -> ProbeResult:
        start = time.monotonic()
        try:
            self._session().head(self._url(address), timeout=timeout, allow_redirects=False)
            outcome = ProbeOutcome.RESPONDED
        except requests.Timeout:
            # ConnectTimeout is also a ConnectionError, so this must come first
            outcome = ProbeOutcome.TIMEOUT
        except requests.RequestException as e:
            logger.debug(f"{address}: fast failure ({type(e).__name__})")
            outcome = ProbeOutcome.REFUSED
        elapsed_ms = (time.monotonic() - start) * 1000.0
        # requests applies the timeout per socket read; a slow answer still counts as absent.
        # The wall-clock cut-off is enforced by HostProber.
        if elapsed_ms > timeout * 1000.0:
            outcome = ProbeOutcome.TIMEOUT
        return ProbeResult(address=address, outcome=outcome, elapsed_ms=round(elapsed_ms, 1))
