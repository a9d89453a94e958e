#!/usr/bin/env python3
"""
CLI for starting the screenshot organiser.

Usage:
    python -m src.cli                  # reads ./config.json
    python -m src.cli /path/to/config.json
"""

import argparse
import logging
import sys
from typing import List, Optional

from src.organiser import (
    ConfigError,
    OrganiserProcess,
    ShutdownCoordinator,
    WatchSetupError,
    load_config,
)
from src.organiser.config import DEFAULT_CONFIG_PATH


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Organise timestamped screenshots as they are created",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to the JSON config file (default: {DEFAULT_CONFIG_PATH})",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logger.info("Starting screenshot organiser")
    logger.info(f"Attempting to read config from `{args.config}`")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    logger.info("Config successfully read")

    shutdown = ShutdownCoordinator()

    try:
        process = OrganiserProcess(config, token=shutdown.token)
    except WatchSetupError as e:
        logger.error(str(e))
        return 1

    shutdown.install()
    try:
        process.run()
    except WatchSetupError as e:
        logger.error(str(e))
        return 1
    finally:
        shutdown.restore()

    logger.info("Organiser stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
