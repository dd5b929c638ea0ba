"""Command-line entry point: run the full demo, no flags."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from xrpl_airgap.config import load_settings
from xrpl_airgap.demo import run_demo
from xrpl_airgap.errors import ConfigurationError, XRPLDemoError
from xrpl_airgap.logs import configure_logging

LOGGER = logging.getLogger("xrpl_airgap.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2

_CONFIG_HELP = """\
Set USER1_SEED and USER2_SEED in the environment or in a .env file:

    USER1_SEED=your_first_testnet_seed_here
    USER2_SEED=your_second_testnet_seed_here
"""


def main(argv: list[str] | None = None) -> int:
    """Run Part 1 (XRP + token transfers) then Part 2 (offline signing)."""
    parser = argparse.ArgumentParser(
        prog="xrpl-airgap",
        description="XRPL testnet demo: transfers, trustlines and air-gapped signing.",
        epilog=_CONFIG_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.parse_args(argv)

    configure_logging()
    try:
        settings = load_settings()
        settings.signers()
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        print(_CONFIG_HELP, file=sys.stderr)
        return EXIT_CONFIG

    configure_logging(settings.log_level)
    LOGGER.info("starting XRPL demo against %s", settings.rpc_url)

    try:
        asyncio.run(run_demo(settings))
    except XRPLDemoError as exc:
        LOGGER.error("demo aborted: %s: %s", type(exc).__name__, exc)
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
