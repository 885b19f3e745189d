"""Entry point for the gavel CLI."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from gavel.cli.arg_parser import parse_args
from gavel.cli.output import print_error, print_info
from gavel.config.loader import load_config
from gavel.config.schema import Config
from gavel.core.errors import EXIT_INTERRUPTED, EXIT_USAGE, ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GAVEL_CONFIG"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.WARNING) -> None:
    """Send gavel.* log records to stderr at the given level.

    Reconfiguring replaces the previous handler.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    gavel_logger = logging.getLogger("gavel")
    gavel_logger.setLevel(level)
    gavel_logger.handlers.clear()
    gavel_logger.addHandler(handler)
    gavel_logger.propagate = False


def build_config(args: argparse.Namespace) -> Config:
    """Load config and apply per-invocation CLI overrides.

    Raises:
        ConfigError: If the config file is invalid or an override is out of range.
    """
    path = args.config
    if path is None and os.environ.get(CONFIG_ENV_VAR):
        path = Path(os.environ[CONFIG_ENV_VAR])
    config = load_config(path)

    overrides: dict[str, Any] = {}
    if getattr(args, "timeout", None) is not None:
        if args.timeout <= 0:
            raise ConfigError(f"--timeout must be positive, got {args.timeout}")
        overrides["request_timeout"] = args.timeout
    if getattr(args, "insecure", False):
        overrides["verify_tls"] = False
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return config.model_copy(update=overrides)


async def run_command(args: argparse.Namespace, config: Config) -> int:
    """Dispatch a parsed command and return its exit code."""
    from gavel.cli.commands import cmd_fetch, cmd_mmr

    if args.command == "fetch":
        return await cmd_fetch(args.endpoint, args.block_number, args.resolve, config)
    if args.command == "mmr":
        return await cmd_mmr(args.endpoint, args.block_numbers, args.resolve, config)
    print_error(f"Unknown command: {args.command}")
    return EXIT_USAGE


def main(argv: list[str] | None = None) -> None:
    """Entry point for the gavel CLI."""
    # Load .env file if present
    load_dotenv()

    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = build_config(args)
    except ConfigError as e:
        print_error(e.message)
        raise SystemExit(e.exit_code) from e

    configure_logging(getattr(logging, config.log_level))

    try:
        exit_code = asyncio.run(run_command(args, config))
    except KeyboardInterrupt:
        # asyncio.run cancels the command task first, so the connection is already closed
        print_info("Interrupted")
        exit_code = EXIT_INTERRUPTED
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
