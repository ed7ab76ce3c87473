"""Output formatting and error reporting shared by the CLIs."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from loguru import logger
from tabulate import tabulate

from netvisio.discovery.mermaid import MermaidGenerator
from netvisio.discovery.models import Device
from netvisio.exceptions import ConfigurationError, NetvisioError, RemoteCallError, TopologyError
from netvisio.retry import is_transient

OUTPUT_FORMATS = ("mermaid", "json", "table")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_STRUCTURE = 2
EXIT_TRANSIENT = 3


def format_devices(devices: list[Device], fmt: str = "mermaid", direction: str = "TD") -> str:
    """Render a sanitized device list as Mermaid, JSON or a plain table."""
    if fmt == "json":
        return json.dumps([d.model_dump(mode="json") for d in devices], indent=2)
    if fmt == "table":
        by_id = {d.id: d for d in devices}
        rows = [
            [
                d.kind.value,
                d.display_name,
                d.address,
                d.hardware_address,
                d.vendor,
                d.state.value.upper(),
                "" if d.latency_ms is None else f"{d.latency_ms:g}",
                by_id[d.parent_id].display_name if d.parent_id in by_id else "-",
            ]
            for d in devices
        ]
        headers = ["Type", "Name", "IP", "MAC", "Vendor", "State", "Latency (ms)", "Parent"]
        return tabulate(rows, headers=headers, tablefmt="simple")
    return MermaidGenerator(devices, direction=direction).generate()


def write_output(output: str, path: str | None) -> None:
    if path:
        Path(path).write_text(output + "\n")
        logger.info(f"Output written to {path}")
    else:
        print(output)


def report_error(error: NetvisioError) -> int:
    """Print a user-facing message for ``error`` and return the exit code.

    Structural problems, temporary unavailability and other failures are
    reported differently since only the second is worth retrying.
    """
    if isinstance(error, TopologyError):
        print(f"Could not determine network structure: {error}", file=sys.stderr)
        return EXIT_STRUCTURE
    if isinstance(error, RemoteCallError) and is_transient(error):
        print(f"Temporarily unavailable, try again later: {error}", file=sys.stderr)
        return EXIT_TRANSIENT
    if isinstance(error, ConfigurationError):
        print(f"Configuration error: {error}", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Error: {error}", file=sys.stderr)
    return EXIT_FAILURE
