#!/usr/bin/env python3
"""
Pollen Sync Workflow - Mirror Pollen Mobile explorer data into Postgres.

Syncs every flower, then every flower's rewards, then (optionally) the hexes
of each area passed on the command line. Safe to run from cron: all writes
are upserts.

Each HEX_GROUP is a comma-separated list of level-5 H3 cells bounding an area.

Usage:
    # Flowers and rewards only
    uv run python -m workflows.sync_pollen

    # Plus hexes for NYC and the Bay Area
    uv run python -m workflows.sync_pollen \
        "852a1393fffffff,852a104bfffffff,852a1057fffffff" \
        "85283457fffffff,852830c7fffffff,85283467fffffff"
"""

import argparse
import asyncio
import os
import sys

from loguru import logger

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db.client import init_db, close_db
from db.migrate import ensure_schema
from lib.cells import InvalidHexGroupError, parse_hex_groups
from lib.pollen import PollenApiClient, PollenApiConfig
from services.geocoding import GeocodeCache, GeocodeRepo, NominatimClient, NominatimConfig
from services.sync import Service


async def sync(hex_groups):
    """Bootstrap the schema, warm the geocode cache, and run every sync."""
    api_config = PollenApiConfig.from_env()

    await init_db()
    try:
        await ensure_schema()

        async with PollenApiClient(api_config) as api, \
                NominatimClient(NominatimConfig.from_env()) as nominatim:
            cache = GeocodeCache(GeocodeRepo(), nominatim)
            await cache.warm()

            service = Service(api=api, geocoder=cache)
            return await service.run(hex_groups)
    finally:
        await close_db()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Sync Pollen Mobile hexes, flowers and rewards into Postgres",
    )
    parser.add_argument(
        "hex_groups",
        nargs="*",
        metavar="HEX_GROUP",
        help="Comma-separated list of H3 hexes bounding an area to sync in detail",
    )
    args = parser.parse_args(argv)

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="<level>{level: <8}</level> | {message}",
    )

    try:
        # Fail fast on bad input, before any database or network work
        hex_groups = parse_hex_groups(args.hex_groups)
        asyncio.run(sync(hex_groups))
    except InvalidHexGroupError as e:
        logger.error(f"Error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Error: {e}")
        return 1

    logger.info("Sync complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
