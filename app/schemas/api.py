from datetime import date
from typing import Any

from pydantic import BaseModel


class IngestionResultOut(BaseModel):
    tokens_processed: int
    snapshots_created: int
    skipped: int
    errors: int
    duration_ms: int


class IngestionResponse(BaseModel):
    data: IngestionResultOut


class ErrorResponse(BaseModel):
    error: str


class ConfigListResponse(BaseModel):
    data: dict[str, Any]


class ConfigUpdateRequest(BaseModel):
    key: str
    value: Any = None


class ConfigEntryOut(BaseModel):
    key: str
    value: Any = None

    class Config:
        from_attributes = True


class ConfigEntryResponse(BaseModel):
    data: ConfigEntryOut


class HealthResponse(BaseModel):
    database: str
    latest_snapshot_date: date | None
