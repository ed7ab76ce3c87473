"""CLI entry point for device discovery — standalone-capable.

Sub-commands:
  scan     Heuristic HTTP probe of a /24 (e.g. 192.168.1.)
  import   Parse pasted ``arp -a`` text from a file or stdin (no network)

Examples:
  netvisio discover scan 192.168.1. --format table
  arp -a | netvisio discover import - -o topology.md
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading

from loguru import logger

from netvisio.config import ProberConfig
from netvisio.discovery.output import (
    EXIT_OK,
    OUTPUT_FORMATS,
    format_devices,
    report_error,
    write_output,
)
from netvisio.discovery.models import Device
from netvisio.discovery.oui import load_oui_db
from netvisio.discovery.parser import parse_arp_text
from netvisio.discovery.prober import HostProber
from netvisio.discovery.topology import sanitize_topology
from netvisio.exceptions import NetvisioError


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        help="Output file (default: stdout)",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="mermaid",
        help="Output format (default: mermaid)",
    )
    parser.add_argument(
        "--direction",
        choices=["TD", "LR"],
        default="TD",
        help="Mermaid flowchart direction (default: TD)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build argparse parser for device discovery."""
    parser = argparse.ArgumentParser(
        prog="netvisio discover",
        description="Device discovery with topology repair and Mermaid/JSON/table output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    scan = subparsers.add_parser("scan", help="Probe a subnet over HTTP")
    scan.add_argument("prefix", help="Subnet prefix with trailing dot, e.g. 192.168.1.")
    scan.add_argument(
        "--range",
        dest="host_range",
        default="1-254",
        help="Host suffix range, inclusive (default: 1-254)",
    )
    scan.add_argument(
        "--concurrency",
        type=int,
        default=12,
        help="Simultaneous probes per batch (default: 12)",
    )
    scan.add_argument(
        "--timeout",
        type=float,
        default=1.5,
        help="Per-probe timeout in seconds (default: 1.5)",
    )
    scan.add_argument(
        "--fanout-threshold",
        type=int,
        default=6,
        help="Hosts above which a virtual switch is synthesized (default: 6)",
    )
    _add_output_args(scan)

    imp = subparsers.add_parser("import", help="Parse arp -a style text")
    imp.add_argument("source", help="Text file to parse, or '-' for stdin")
    imp.add_argument(
        "--oui",
        action="store_true",
        help="Resolve MAC vendors from the IEEE OUI registry (downloads once)",
    )
    _add_output_args(imp)

    return parser


def _parse_range(value: str) -> tuple[int, int]:
    """Parse ``START-END`` (or a single suffix) into an inclusive range."""
    start_s, _, end_s = value.partition("-")
    start = int(start_s)
    end = int(end_s) if end_s else start
    return start, end


def _print_progress(percent: int, found: int) -> None:
    logger.info(f"Scan progress: {percent}% ({found} found)")


def cmd_scan(parsed: argparse.Namespace) -> int:
    """Run the subnet prober and print the sanitized tree."""
    try:
        start, end = _parse_range(parsed.host_range)
    except ValueError:
        print(f"Invalid --range: {parsed.host_range}", file=sys.stderr)
        return 1

    config = ProberConfig(
        range_start=start,
        range_end=end,
        concurrency=parsed.concurrency,
        timeout=parsed.timeout,
        fanout_threshold=parsed.fanout_threshold,
    )
    prober = HostProber(config)
    cancel = threading.Event()

    def _on_sigint(signum: int, frame: object) -> None:
        logger.warning("Interrupted, stopping after the current batch...")
        cancel.set()

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        devices = prober.scan(parsed.prefix, on_progress=_print_progress, cancel=cancel)
    finally:
        signal.signal(signal.SIGINT, previous)

    return _emit(devices, parsed)


def cmd_import(parsed: argparse.Namespace) -> int:
    """Parse text from a file or stdin and print the sanitized tree."""
    if parsed.source == "-":
        text = sys.stdin.read()
    else:
        with open(parsed.source, encoding="utf-8", errors="replace") as f:
            text = f.read()

    oui_db = load_oui_db() if parsed.oui else None
    return _emit(parse_arp_text(text, oui_db=oui_db), parsed)


def _emit(devices: list[Device], parsed: argparse.Namespace) -> int:
    if not devices:
        print("No devices found.", file=sys.stderr)
        return EXIT_OK
    tree = sanitize_topology(devices)
    write_output(format_devices(tree, parsed.format, parsed.direction), parsed.output)
    return EXIT_OK


def main(args: list[str] | None = None) -> None:
    """Main entry point for discovery CLI."""
    parser = build_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        sys.exit(1)

    if not parsed.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")

    try:
        if parsed.command == "scan":
            code = cmd_scan(parsed)
        else:
            code = cmd_import(parsed)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    except NetvisioError as e:
        code = report_error(e)
    sys.exit(code)


if __name__ == "__main__":
    main()
