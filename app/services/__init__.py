# Services package
from app.services.catalog import CatalogReconciler, CatalogRepository
from app.services.config_service import SystemConfigStore, resolve_token_scope
from app.services.ingestion_service import IngestionResult, IngestionService
from app.services.snapshot_writer import SnapshotOutcome, SnapshotWriter

__all__ = [
    "CatalogReconciler",
    "CatalogRepository",
    "SystemConfigStore",
    "resolve_token_scope",
    "IngestionResult",
    "IngestionService",
    "SnapshotOutcome",
    "SnapshotWriter",
]
