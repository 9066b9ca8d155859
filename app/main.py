from pathlib import Path
from contextlib import asynccontextmanager
import asyncio
from typing import Optional

from alembic import command
from alembic.config import Config
from fastapi import FastAPI

from app.api.routes import admin, health
from app.core.config import settings
from app.core.db import SessionLocal
from app.core.errors import MarketDataError
from app.core.logging import get_logger
from app.ingestion.cmc_client import CMCClient
from app.services.ingestion_service import IngestionService


log = get_logger("app")

# Background task handle
_ingestion_task: Optional[asyncio.Task] = None


def run_migrations() -> None:
    """Execute Alembic migrations programmatically on startup."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    log.info("Running Alembic migrations to head")
    command.upgrade(alembic_cfg, "head")
    log.info("Alembic migrations applied")


async def run_daily_ingestion() -> None:
    """Run one ingestion; failures are logged, never raised into the scheduler loop."""
    db = SessionLocal()
    try:
        service = IngestionService(db, CMCClient())
        result = await service.run()
        if result.errors:
            log.warning(f"Daily ingestion finished with {result.errors} token errors")
    except MarketDataError as exc:
        log.error(f"Daily ingestion aborted, upstream fetch failed: {exc}")
    except Exception as exc:
        log.exception(f"Daily ingestion failed: {exc}")
    finally:
        db.close()


async def scheduled_ingestion_task() -> None:
    """Background task that runs ingestion at the configured interval."""
    interval = settings.INGESTION_INTERVAL_SECONDS
    log.info(f"Scheduled ingestion task started (interval: {interval}s)")

    # Same-day reruns are skipped per token, so running on startup is safe
    await run_daily_ingestion()

    while True:
        try:
            await asyncio.sleep(interval)
            await run_daily_ingestion()
        except asyncio.CancelledError:
            log.info("Scheduled ingestion task cancelled")
            break


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _ingestion_task

    log.info(f"Starting application in {settings.ENV.upper()} mode")

    try:
        run_migrations()
    except Exception:
        log.exception("Failed to apply migrations on startup")
        raise

    if settings.INGESTION_ENABLED:
        log.info("Starting scheduled ingestion background task...")
        _ingestion_task = asyncio.create_task(scheduled_ingestion_task())
    else:
        log.info("In-process ingestion schedule disabled (INGESTION_ENABLED=false)")

    yield

    log.info("Shutting down services...")

    if _ingestion_task:
        log.info("Cancelling scheduled ingestion task...")
        _ingestion_task.cancel()
        try:
            await _ingestion_task
        except asyncio.CancelledError:
            pass

    log.info("Application shutdown complete")


# Configure FastAPI based on environment
app = FastAPI(
    title="Token Snapshot Backend",
    description="Daily CoinMarketCap ingestion with one immutable snapshot per token per day",
    version="1.0.0",
    lifespan=lifespan,
    # Disable docs in production
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
    debug=settings.debug_enabled,
)


app.include_router(admin.router)
app.include_router(health.router)
