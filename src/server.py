"""Protean Engine runner for the storefront domain.

Processes events asynchronously when ``event_processing = "async"``
(staging/production): customer notifications are dispatched by the
Engine's subscriptions instead of inside the request.

Usage:
    PROTEAN_ENV=production python src/server.py
"""

import argparse
import asyncio

from protean.server.engine import Engine


async def run():
    from storefront.domain import storefront

    storefront.init()
    engine = Engine(storefront)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.parse_args()

    asyncio.run(run())


if __name__ == "__main__":
    main()
