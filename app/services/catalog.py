"""Token catalog persistence and reconciliation against provider listings."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.db import dialect_insert
from app.core.logging import get_logger
from app.models.snapshot import DailySnapshot
from app.models.token import Token
from app.schemas.cmc import CMCListing

log = get_logger("catalog")

# Fields refreshed from every listing; launch_date, slug and cmc_id stay as created
MUTABLE_FIELDS = ("name", "symbol", "chain", "is_tracked")


class CatalogRepository:
    """Persistence port for tokens and their daily snapshots.

    Both writes are single statements relying on unique constraints
    (``tokens.cmc_id`` and ``daily_snapshots(token_id, date)``), so two
    overlapping runs cannot produce duplicates.
    """

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------
    def find_token_by_cmc_id(self, cmc_id: int) -> Optional[Token]:
        stmt = select(Token).where(Token.cmc_id == cmc_id).execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert_token(self, fields: Dict[str, Any]) -> Token:
        """Insert a token or refresh its mutable fields.

        ``categories=None`` means "no information": the stored list is kept.
        """
        insert = dialect_insert(self.db)
        values = dict(fields)
        categories = values.get("categories")
        if categories is None:
            values["categories"] = []

        stmt = insert(Token).values(**values)
        update = {name: stmt.excluded[name] for name in MUTABLE_FIELDS}
        if categories is not None:
            update["categories"] = stmt.excluded.categories
        update["updated_at"] = func.now()

        stmt = stmt.on_conflict_do_update(index_elements=[Token.cmc_id], set_=update)
        self.db.execute(stmt)

        token = self.find_token_by_cmc_id(values["cmc_id"])
        if token is None:
            raise RuntimeError(f"Token cmc_id={values['cmc_id']} missing right after upsert")
        return token

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------
    def find_snapshot(self, token_id: uuid.UUID, day: date) -> Optional[DailySnapshot]:
        stmt = select(DailySnapshot).where(DailySnapshot.token_id == token_id, DailySnapshot.date == day)
        return self.db.execute(stmt).scalar_one_or_none()

    def insert_snapshot_if_absent(self, values: Dict[str, Any]) -> bool:
        """Insert one snapshot; False when (token_id, date) already exists."""
        insert = dialect_insert(self.db)
        stmt = insert(DailySnapshot).values(**values)
        stmt = stmt.on_conflict_do_nothing(index_elements=[DailySnapshot.token_id, DailySnapshot.date])
        result = self.db.execute(stmt)
        return bool(result.rowcount)


def map_token_fields(record: CMCListing) -> Dict[str, Any]:
    """Map a provider record onto the ``Token`` columns.

    An empty tag list maps to ``categories=None`` so it never clears
    previously stored categories.
    """
    return {
        "cmc_id": record.id,
        "name": record.name,
        "symbol": record.symbol,
        "slug": record.slug,
        "categories": list(record.tags) if record.tags else None,
        "chain": record.platform.name if record.platform else None,
        "launch_date": record.date_added,
        "is_tracked": True,
    }


class CatalogReconciler:
    """Keeps the token catalog in sync with the latest listing."""

    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    def reconcile(self, record: CMCListing) -> Token:
        token = self.catalog.upsert_token(map_token_fields(record))
        log.debug(f"catalog.reconciled cmc_id={record.id} symbol={record.symbol} token_id={token.id}")
        return token
