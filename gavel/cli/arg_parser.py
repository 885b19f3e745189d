"""Argument parsing for the gavel CLI."""

import argparse
from pathlib import Path

from gavel import __version__


def add_connection_args(parser: argparse.ArgumentParser) -> None:
    """Add the endpoint, --resolve, --timeout and --insecure arguments."""
    parser.add_argument(
        "--resolve", "-r",
        metavar="IPV4",
        help="Connect to this IPv4 address instead of resolving the endpoint host via DNS",
    )
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        metavar="SECS",
        help="Seconds to wait for each response (default: from config, 30)",
    )
    parser.add_argument(
        "--insecure", "-k",
        action="store_true",
        help="Skip TLS certificate verification (self-signed node certificates)",
    )
    parser.add_argument("endpoint", help="WebSocket URL of the node (ws:// or wss://)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gavel",
        description="Opinionated CLI tool to hammer the data out of blockchain via WebSockets.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Config file to use instead of ~/.gavel/config.json and ./.gavel/config.json",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Fetch block data from a node",
        description=(
            "Fetch a block from a blockchain node. Without a block number the "
            "latest block (chain head) is fetched."
        ),
    )
    add_connection_args(fetch_parser)
    fetch_parser.add_argument(
        "block_number",
        nargs="?",
        help="Block number in decimal or hex (e.g. 0x1A3B), or a 0x block hash. Omit for latest.",
    )

    mmr_parser = subparsers.add_parser(
        "mmr",
        help="Generate MMR proofs for blocks",
        description=(
            "Ask the node to generate Merkle Mountain Range proofs. Without block "
            "numbers a proof for the latest block is generated."
        ),
    )
    add_connection_args(mmr_parser)
    mmr_parser.add_argument(
        "block_numbers",
        nargs="*",
        metavar="BLOCK_NUMBERS",
        help="Comma-separated block numbers (e.g. 1,2,3). Omit for latest.",
    )

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
