"""Ingestion entrypoint - Standalone script for schedulers (cron, ECS tasks).

Usage:
    python -m app.ingestion_entrypoint

Exit codes:
    0  run completed with no token errors
    1  upstream fetch failed, or at least one token errored
"""

import asyncio
import sys

from app.core.db import SessionLocal
from app.core.errors import MarketDataError
from app.core.logging import get_logger
from app.ingestion.cmc_client import CMCClient
from app.services.ingestion_service import IngestionResult, IngestionService

logger = get_logger("ingestion_entrypoint")


async def run_ingestion_job() -> IngestionResult:
    """Run one daily ingestion against CoinMarketCap."""
    with SessionLocal() as db:
        service = IngestionService(db, CMCClient())
        return await service.run()


def main() -> int:
    """Main entry point for the daily ingestion."""
    logger.info("Daily ingestion starting...")

    try:
        result = asyncio.run(run_ingestion_job())
    except MarketDataError as exc:
        logger.error(f"Daily ingestion aborted: {exc}")
        return 1

    logger.info(f"Daily ingestion completed: {result.as_dict()}")
    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(main())
