"""
RiskBrain command-line entry point.

Runs one assessment for an address and prints the merged result as JSON.

Run with: python -m riskbrain.main 0xabc... --type evm --chain ethereum
"""

import argparse
import asyncio
import logging
import sys

from riskbrain.config import get_settings
from riskbrain.services.factory import ServiceFactory


def setup_logging(level: str) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    # Reduce noise from external libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="riskbrain",
        description="Assess the risk of a blockchain address or token.",
    )
    parser.add_argument("address", help="Address or token contract to assess")
    parser.add_argument(
        "--type",
        dest="subject_type",
        default="evm",
        help="Address family passed to processors (default: evm)",
    )
    parser.add_argument("--chain", default=None, help="Chain name (default: ethereum)")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> None:
    """
    Main application entry point.

    Initializes:
    1. Configuration from environment
    2. Logging
    3. Services via factory

    Then runs one assessment and prints it.
    """
    args = parse_args(argv)
    settings = get_settings()

    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Environment: {settings.environment}")

    analyzer = ServiceFactory(settings).create_analyzer()
    result = await analyzer.analyze(args.address, args.subject_type, chain=args.chain)

    print(result.model_dump_json(indent=2))


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nStopped by user.", file=sys.stderr)


if __name__ == "__main__":
    run()
