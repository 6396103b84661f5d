"""Print net worth, allocation, performers or history for a user as JSON."""

from __future__ import annotations

import argparse
import asyncio
import logging

from networth.config import get_settings
from networth.core.logging import setup_logging
from networth.core.telemetry import setup_telemetry, shutdown_telemetry
from networth.db import Database
from networth.services import (
    calculate_asset_breakdown,
    calculate_currency_exposure,
    calculate_historical_net_worth,
    calculate_net_worth,
    get_top_performers,
)
from networth.services.storage import SqlPortfolioSource

logger = logging.getLogger(__name__)

REPORTS = ("net-worth", "breakdown", "exposure", "performers", "history")


async def _run(args: argparse.Namespace) -> None:
    settings = get_settings()
    database = Database(settings.database_url)
    setup_telemetry(settings, database.engine)
    source = SqlPortfolioSource(database)
    options = {"display_currency": args.currency, "settings": settings}
    try:
        if args.report == "net-worth":
            result = await calculate_net_worth(args.user, source, **options)
        elif args.report == "breakdown":
            result = await calculate_asset_breakdown(args.user, source, **options)
        elif args.report == "exposure":
            result = await calculate_currency_exposure(args.user, source, **options)
        elif args.report == "performers":
            result = await get_top_performers(args.user, source, args.limit, **options)
        else:
            result = await calculate_historical_net_worth(args.user, source, args.months, **options)
    finally:
        await database.dispose()
        shutdown_telemetry()
    print(result.model_dump_json(by_alias=True, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute a net worth report for a user")
    parser.add_argument("--user", required=True)
    parser.add_argument("--report", default="net-worth", choices=REPORTS)
    parser.add_argument("--currency", default=None, help="Display currency, e.g. AUD")
    parser.add_argument("--limit", type=int, default=None, help="Performers per list")
    parser.add_argument("--months", type=int, default=None, help="History length")
    args = parser.parse_args()
    setup_logging(get_settings().log_level)
    logger.info("Running %s report for user %s", args.report, args.user)
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
