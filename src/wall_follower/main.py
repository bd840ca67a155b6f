#!/usr/bin/env python3
"""
Wall Follower - Main Entry Point

Usage:
    wall-follower                     # Run robot controller
    wall-follower --web               # Run with web interface (debug mode)
    wall-follower --params my.json    # Load parameters from a file
"""

import argparse
import asyncio
import logging
from pathlib import Path


def main():
    """Main entry point."""
    from wall_follower.params import PARAMS_FILE

    parser = argparse.ArgumentParser(description="Wall Follower Robot Controller")
    parser.add_argument(
        "--web",
        action="store_true",
        help="Enable web interface for debugging",
    )
    parser.add_argument(
        "--params",
        type=Path,
        default=PARAMS_FILE,
        help="Parameters JSON file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args()

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Wall follower starting...")

    from wall_follower.control import Controller
    from wall_follower.params import Parameters

    controller = Controller(params=Parameters.load(args.params))

    async def run():
        runner = None
        if args.web:
            from wall_follower.web import run_server
            runner = await run_server(controller=controller)
        try:
            await controller.run()
        finally:
            if runner:
                await runner.cleanup()

    asyncio.run(run())


if __name__ == "__main__":
    main()
