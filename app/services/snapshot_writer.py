"""Daily snapshot writes, at most one per token per UTC calendar day."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from app.core.logging import get_logger
from app.schemas.cmc import CMCListing
from app.services.catalog import CatalogRepository

log = get_logger("snapshot_writer")


class SnapshotOutcome(str, enum.Enum):
    CREATED = "created"
    SKIPPED = "skipped"


def today_utc(now: Optional[datetime] = None) -> date:
    """UTC calendar day for ``now`` (defaults to the current time)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).date()


def supply_for(record: CMCListing) -> float:
    """Circulating supply to store for a record.

    Reported only when both market cap and price are positive; otherwise 0,
    flagging the row as degraded provider data. Supply itself is not checked.
    """
    usd = record.usd
    if (usd.market_cap or 0) > 0 and (usd.price or 0) > 0:
        return record.circulating_supply or 0
    return 0


class SnapshotWriter:
    """Writes a token's snapshot for the run day unless one already exists."""

    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    def write_snapshot_if_absent(self, token_id: uuid.UUID, day: date, record: CMCListing) -> SnapshotOutcome:
        if self.catalog.find_snapshot(token_id, day) is not None:
            return SnapshotOutcome.SKIPPED

        usd = record.usd
        inserted = self.catalog.insert_snapshot_if_absent(
            {
                "token_id": token_id,
                "date": day,
                "rank": record.cmc_rank,
                "market_cap": usd.market_cap,
                "circulating_supply": supply_for(record),
                "price_usd": usd.price,
                "volume_24h": usd.volume_24h,
            }
        )
        if not inserted:
            # A concurrent run wrote the same (token, day) between lookup and insert
            log.warning(f"snapshot.race token_id={token_id} date={day} cmc_id={record.id}")
            return SnapshotOutcome.SKIPPED
        return SnapshotOutcome.CREATED
