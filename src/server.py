"""Protean Engine runner for the logistics domain.

In production (``PROTEAN_ENV=production``) domain events are processed
asynchronously; the Engine delivers them to the invalidation handlers.

Usage:
    python src/server.py
    python src/server.py --test-mode   # process pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


def _get_domain():
    from logistics.domain import logistics

    logistics.init()
    return logistics


async def run(test_mode: bool = False):
    engine = Engine(_get_domain(), test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Freightline Engine runner")
    parser.add_argument("--test-mode", action="store_true", help="Drain pending messages and exit")
    args = parser.parse_args()

    asyncio.run(run(args.test_mode))


if __name__ == "__main__":
    main()
