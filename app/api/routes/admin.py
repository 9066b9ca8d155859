"""Admin routes - trigger ingestion and manage system configuration."""

from typing import Callable

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_listing_source_factory, require_admin
from app.core.errors import ConfigValueError, MarketDataError
from app.core.logging import get_logger
from app.ingestion.base import BaseListingSource
from app.schemas.api import (
    ConfigEntryOut,
    ConfigEntryResponse,
    ConfigListResponse,
    ConfigUpdateRequest,
    ErrorResponse,
    IngestionResponse,
    IngestionResultOut,
)
from app.services.config_service import SystemConfigStore
from app.services.ingestion_service import IngestionService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])
log = get_logger("admin_routes")


@router.post(
    "/ingest",
    response_model=IngestionResponse,
    responses={502: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def trigger_ingestion(
    db: Session = Depends(get_db),
    source_factory: Callable[[], BaseListingSource] = Depends(get_listing_source_factory),
):
    """
    Run the daily ingestion now.

    1. Resolve token scope (``token_scope`` config, default 1000)
    2. Fetch the top listing from CoinMarketCap (one call)
    3. Upsert each token and write today's snapshot if missing

    Re-running on the same UTC day is safe: existing snapshots are skipped.
    A failed upstream fetch returns 502 and writes nothing.
    """
    log.info("admin.ingest.triggered")

    try:
        service = IngestionService(db, source_factory())
        result = await service.run()
    except MarketDataError as exc:
        log.error(f"admin.ingest.failed upstream fetch: {exc}")
        return JSONResponse(status_code=502, content={"error": "Ingestion failed"})
    except Exception as exc:  # noqa: BLE001
        log.exception(f"admin.ingest.failed: {exc}")
        return JSONResponse(status_code=500, content={"error": "Ingestion failed"})

    return IngestionResponse(data=IngestionResultOut(**result.as_dict()))


@router.get("/config", response_model=ConfigListResponse)
def list_config(db: Session = Depends(get_db)):
    """All key/value configuration entries."""
    configs = SystemConfigStore(db).list_all()
    log.info(f"admin.config.list count={len(configs)}")
    return ConfigListResponse(data=configs)


@router.put("/config", response_model=ConfigEntryResponse, responses={400: {"model": ErrorResponse}})
def update_config(body: ConfigUpdateRequest, db: Session = Depends(get_db)):
    """Create or replace one configuration entry (e.g. ``token_scope``)."""
    if not body.key:
        return JSONResponse(status_code=400, content={"error": "key is required"})
    # An explicit null is a value; only an omitted field is rejected
    if "value" not in body.model_fields_set:
        return JSONResponse(status_code=400, content={"error": "value is required"})

    try:
        entry = SystemConfigStore(db).set_value(body.key, body.value)
    except ConfigValueError as exc:
        log.warning(f"admin.config.rejected key={body.key}: {exc}")
        return JSONResponse(status_code=400, content={"error": str(exc)})

    return ConfigEntryResponse(data=ConfigEntryOut.model_validate(entry))
