"""Daily ingestion: one CoinMarketCap listing in, one snapshot per token per day out."""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.ingestion.base import BaseListingSource
from app.schemas.cmc import CMCListing
from app.services.catalog import CatalogReconciler, CatalogRepository
from app.services.config_service import ConfigStore, SystemConfigStore, resolve_token_scope
from app.services.snapshot_writer import SnapshotOutcome, SnapshotWriter, today_utc

log = get_logger("ingestion_service")


@dataclass(frozen=True)
class TokenOutcome:
    """Result of processing one listing entry: a snapshot outcome or an error."""

    cmc_id: Optional[int]
    symbol: Optional[str]
    snapshot: Optional[SnapshotOutcome] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class IngestionResult:
    tokens_processed: int
    snapshots_created: int
    skipped: int
    errors: int
    duration_ms: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def aggregate(outcomes: Iterable[TokenOutcome], duration_ms: int) -> IngestionResult:
    """Reduce per-token outcomes into the run summary."""
    processed = created = skipped = errors = 0
    for outcome in outcomes:
        processed += 1
        if not outcome.ok:
            errors += 1
        elif outcome.snapshot is SnapshotOutcome.CREATED:
            created += 1
        else:
            skipped += 1
    return IngestionResult(
        tokens_processed=processed,
        snapshots_created=created,
        skipped=skipped,
        errors=errors,
        duration_ms=duration_ms,
    )


class IngestionService:
    """Runs the daily ingestion against one listing source.

    Flow: resolve scope -> single fetch -> per token (parse + reconcile + snapshot,
    committed on its own) -> aggregate. A failed fetch raises before any
    write; a failing token is rolled back, logged and counted, and the run
    moves on.
    """

    def __init__(
        self,
        db: Session,
        source: BaseListingSource,
        config_store: Optional[ConfigStore] = None,
        catalog: Optional[CatalogRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.source = source
        self.config_store = config_store or SystemConfigStore(db)
        self.catalog = catalog or CatalogRepository(db)
        self.reconciler = CatalogReconciler(self.catalog)
        self.writer = SnapshotWriter(self.catalog)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._log = log

    async def run(self) -> IngestionResult:
        start = time.perf_counter()
        run_log = self._log = log.bind(run_id=str(uuid.uuid4()))

        # One date for the whole batch, even if the run crosses midnight
        day = today_utc(self.clock())
        token_scope = resolve_token_scope(self.config_store)
        # Release the read transaction before the network call
        self.db.commit()

        run_log.info(f"ingestion.start token_scope={token_scope} date={day.isoformat()} source={self.source.name}")

        listing = await self.source.fetch_top_listing(token_scope)

        outcomes: List[TokenOutcome] = [self.process_token(raw, day) for raw in listing]

        duration_ms = int((time.perf_counter() - start) * 1000)
        result = aggregate(outcomes, duration_ms)
        run_log.info(f"ingestion.complete {result.as_dict()}")
        return result

    def process_token(self, raw: Dict[str, Any], day: date) -> TokenOutcome:
        """Parse, reconcile and snapshot one listing entry as a single unit of work."""
        cmc_id = raw.get("id")
        symbol = raw.get("symbol")
        try:
            record = CMCListing.model_validate(raw)
            token = self.reconciler.reconcile(record)
            snapshot = self.writer.write_snapshot_if_absent(token.id, day, record)
            self.db.commit()
        except Exception as exc:  # noqa: BLE001
            self.db.rollback()
            self._log.error(f"ingestion.token.error cmc_id={cmc_id} symbol={symbol}: {type(exc).__name__}: {exc}")
            return TokenOutcome(cmc_id=cmc_id, symbol=symbol, error=str(exc))

        return TokenOutcome(cmc_id=record.id, symbol=record.symbol, snapshot=snapshot)
