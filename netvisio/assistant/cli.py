"""CLI entry point for the AI assistant — standalone-capable.

Sub-commands:
  generate   Invent a plausible small-business LAN
  parse      Extract devices from pasted text (offline: regex parser)
  analyze    Markdown assessment of a device list (JSON file)
  trace      Simulated WAN path to a host
  optimize   Proposed re-linking of a device list (JSON file)

Examples:
  GEMINI_API_KEY=<KEY> netvisio ai generate --format table
  netvisio ai --offline parse arp.txt
  netvisio ai analyze devices.json
"""

from __future__ import annotations

import argparse
import json
import sys

from loguru import logger
from pydantic import TypeAdapter, ValidationError
from tabulate import tabulate

from netvisio.assistant.client import GeminiAssistant
from netvisio.config import AssistantConfig
from netvisio.discovery.models import Device
from netvisio.discovery.output import (
    EXIT_OK,
    OUTPUT_FORMATS,
    format_devices,
    report_error,
    write_output,
)
from netvisio.exceptions import NetvisioError, TopologyError

_DEVICE_LIST = TypeAdapter(list[Device])


def build_parser() -> argparse.ArgumentParser:
    """Build argparse parser for the AI assistant."""
    parser = argparse.ArgumentParser(
        prog="netvisio ai",
        description="Generative-AI backed topology generation, parsing and analysis",
    )
    parser.add_argument("--api-key", help="Gemini API key (default: $GEMINI_API_KEY or $API_KEY)")
    parser.add_argument("--model", help="Gemini model name (default: gemini-2.5-flash)")
    parser.add_argument(
        "--offline",
        action="store_true",
        default=None,
        help="Never call the AI service; 'parse' falls back to the regex parser",
    )
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="mermaid",
        help="Output format for device lists (default: mermaid)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("generate", help="Invent a sample network")
    parse = subparsers.add_parser("parse", help="Extract devices from text")
    parse.add_argument("source", help="Text file to parse, or '-' for stdin")
    analyze = subparsers.add_parser("analyze", help="Analyze a device list")
    analyze.add_argument("devices", help="JSON device list (as written by --format json)")
    trace = subparsers.add_parser("trace", help="Simulate a WAN traceroute")
    trace.add_argument("target", help="Hostname or IP")
    optimize = subparsers.add_parser("optimize", help="Propose an improved topology")
    optimize.add_argument("devices", help="JSON device list (as written by --format json)")
    return parser


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    with open(source, encoding="utf-8", errors="replace") as f:
        return f.read()


def _load_devices(path: str) -> list[Device]:
    """Load a JSON device list written by ``--format json``."""
    try:
        return _DEVICE_LIST.validate_json(_read_text(path))
    except ValidationError as e:
        raise TopologyError(f"{path}: not a valid device list: {e.error_count()} error(s)") from e


def _run(assistant: GeminiAssistant, parsed: argparse.Namespace) -> str | None:
    if parsed.command in ("generate", "parse"):
        if parsed.command == "generate":
            devices = assistant.generate()
        else:
            devices = assistant.parse_text(_read_text(parsed.source))
        return format_devices(devices, parsed.format) if devices else None
    if parsed.command == "analyze":
        return assistant.analyze(_load_devices(parsed.devices))
    if parsed.command == "trace":
        hops = assistant.trace(parsed.target)
        rows = [[h.hop_number, h.address, h.hostname, f"{h.latency_ms:g}", h.location or "Unknown"] for h in hops]
        return tabulate(rows, headers=["Hop", "IP", "Hostname", "Latency (ms)", "Location"], tablefmt="simple")
    result = assistant.optimize(_load_devices(parsed.devices))
    if parsed.format == "json":
        return json.dumps(result.model_dump(mode="json"), indent=2)
    return result.explanation + "\n\n" + format_devices(result.topology, parsed.format)


def main(args: list[str] | None = None) -> None:
    """Main entry point for the assistant CLI."""
    parser = build_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        sys.exit(1)

    if not parsed.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")

    config = AssistantConfig.from_env(api_key=parsed.api_key, model=parsed.model, offline=parsed.offline)
    assistant = GeminiAssistant(config)

    try:
        output = _run(assistant, parsed)
    except NetvisioError as e:
        sys.exit(report_error(e))
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if output is None:
        print("No devices found.", file=sys.stderr)
    else:
        write_output(output, parsed.output)
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
