"""Command-line interface for minerdash.

Provides the main entry point for running the proxy server, sending a
single raw command to the miner daemon, or printing a status overview
fetched from a running proxy.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="minerdash",
        description="Monitoring and control proxy for cgminer-based ASIC miners",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/minerdash.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP proxy server")
    serve_parser.add_argument("--host", type=str, default=None, help="Listen address")
    serve_parser.add_argument("--port", type=int, default=None, help="Listen port")

    command_parser = subparsers.add_parser(
        "command", help="Send one command straight to the miner daemon",
    )
    command_parser.add_argument("name", help="Command name (e.g., 'summary', 'ascset')")
    command_parser.add_argument(
        "parameter", nargs="?", default=None,
        help="Comma-separated parameters (e.g., '0,freq,550')",
    )

    status_parser = subparsers.add_parser(
        "status", help="Print summary, devices and pools from a running proxy",
    )
    status_parser.add_argument(
        "--url", type=str, default=None,
        help="Proxy base URL (default: client.base_url from config)",
    )

    return parser.parse_args(argv)


async def _send_command(settings, args) -> int:
    """Send one command to the daemon and print the JSON reply."""
    from minerdash.cgminer import commands
    from minerdash.cgminer.client import CGMinerClient
    from minerdash.cgminer.errors import MinerError

    client = CGMinerClient.from_config(settings.miner)
    command = commands.with_parameter(args.name, args.parameter)
    try:
        reply = await client.send_command(command)
    except MinerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(reply, indent=2))
    return 0


async def _status(settings, args) -> int:
    """Fetch and print a status overview from the proxy."""
    from minerdash.api.client import DashboardClient

    base_url = args.url or settings.client.base_url
    async with DashboardClient(base_url=base_url, timeout=settings.client.timeout) as api:
        summary = await api.get_summary()
        devices = await api.get_devices()
        pools = await api.get_pools()

    if summary is None:
        print(f"No summary available from {base_url}", file=sys.stderr)
        return 1

    print(format_status(summary, devices, pools))
    return 0


def format_status(summary: dict, devices: list[dict], pools: list[dict]) -> str:
    """Render the status overview as plain text."""
    lines = [
        "=" * 60,
        "SUMMARY",
        "=" * 60,
        f"Elapsed:     {summary.get('elapsed', 0)}s",
        f"MHS av:      {summary.get('mhsAv', 0)}",
        f"MHS 5s:      {summary.get('mhs5s', 0)}",
        f"Accepted:    {summary.get('accepted', 0)}",
        f"Rejected:    {summary.get('rejected', 0)}",
        f"HW errors:   {summary.get('hardwareErrors', 0)}",
        f"Best share:  {summary.get('bestShare', 0)}",
        "",
        f"DEVICES ({len(devices)})",
        "-" * 60,
    ]
    for dev in devices:
        name = f"{dev.get('Name', '?')}{dev.get('ID', '')}"
        lines.append(
            f"  [{dev.get('ASC', dev.get('ID', '?'))}] {name:<10} "
            f"{str(dev.get('Enabled', '?')):<2} {str(dev.get('Status', '?')):<8} "
            f"MHS av {dev.get('MHS av', 0)}  Temp {dev.get('Temperature', 0)}"
        )
    lines += ["", f"POOLS ({len(pools)})", "-" * 60]
    for pool in pools:
        lines.append(
            f"  [{pool.get('priority', 0)}] {str(pool.get('status', 'Unknown')):<8} "
            f"{pool.get('url', '')}  user={pool.get('user', '')}  "
            f"A/R {pool.get('accepted', 0)}/{pool.get('rejected', 0)}"
        )
    lines.append("=" * 60)
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the minerdash CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from minerdash.config.settings import load_settings
    from minerdash.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        from minerdash.api.server import main as run_server

        if args.host:
            settings.server.host = args.host
        if args.port:
            settings.server.port = args.port
        run_server(settings)

    elif args.command == "command":
        sys.exit(asyncio.run(_send_command(settings, args)))

    elif args.command == "status":
        sys.exit(asyncio.run(_status(settings, args)))


if __name__ == "__main__":
    main()
