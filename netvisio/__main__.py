"""Orchestrator CLI — dispatches to sub-CLIs.

Sub-commands:
  discover  Heuristic subnet probe or offline arp -a import
  ai        Generative-AI topology generation, parsing and analysis

Examples:
  netvisio discover scan 192.168.1. --format table

  arp -a | netvisio discover import - -o topology.md

  GEMINI_API_KEY=<KEY> netvisio ai generate
"""

from __future__ import annotations

import os
import sys

from tabulate import tabulate

from netvisio import __version__, configure_logging
from netvisio import glogger

COMMANDS = {
    "discover": ("netvisio.discovery.cli", "Device discovery (HTTP probe, arp -a import)"),
    "ai": ("netvisio.assistant.cli", "AI-assisted generation, parsing and analysis"),
}


def _print_usage() -> None:
    print("usage: netvisio <command> [options]\n")
    print("Available commands:")
    for cmd, (_, desc) in COMMANDS.items():
        print(f"  {cmd:14s}  {desc}")
    print("\nRun 'netvisio <command> --help' for command-specific options.")


def _print_startup_banner() -> None:
    startup_rows = [
        ["version", __version__],
        ["python", sys.version.split()[0]],
    ]

    for var in ("LOGURU_LEVEL", "NETVISIO_OFFLINE"):
        val = os.environ.get(var)
        if val:
            startup_rows.append([var, val])

    table_str = tabulate(startup_rows, tablefmt="mixed_grid")
    lines = table_str.split("\n")
    table_width = len(lines[0])
    title = "netvisio starting up"
    title_border = "┍" + "━" * (table_width - 2) + "┑"
    title_row = "│ " + title.center(table_width - 4) + " │"
    separator = lines[0].replace("┍", "┝").replace("┑", "┥").replace("┯", "┿")

    glogger.opt(raw=True).info(
        "\n{}\n", title_border + "\n" + title_row + "\n" + separator + "\n" + "\n".join(lines[1:])
    )


def main() -> None:
    """Main entry point — dispatch to sub-CLI."""
    configure_logging()
    _print_startup_banner()

    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        _print_usage()
        sys.exit(0 if len(sys.argv) >= 2 else 1)

    command = sys.argv[1]
    if command not in COMMANDS:
        print(f"netvisio: unknown command '{command}'\n", file=sys.stderr)
        _print_usage()
        sys.exit(1)

    module_path, _ = COMMANDS[command]

    from importlib import import_module

    module = import_module(module_path)
    module.main(sys.argv[2:])


if __name__ == "__main__":
    main()
