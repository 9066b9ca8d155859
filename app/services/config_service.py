"""Key/value system configuration and the token scope resolver."""

from __future__ import annotations

from typing import Any, Dict, Protocol

from sqlalchemy import JSON, func, select
from sqlalchemy.orm import Session

from app.core.db import dialect_insert
from app.core.errors import ConfigValueError
from app.core.logging import get_logger
from app.models.system_config import SystemConfig

log = get_logger("config_service")

TOKEN_SCOPE_KEY = "token_scope"
DEFAULT_TOKEN_SCOPE = 1000


class ConfigStore(Protocol):
    """Read-only view of the configuration store used by ingestion."""

    def get_int(self, key: str, default: int) -> int: ...


class SystemConfigStore:
    """``system_config`` table access."""

    def __init__(self, db: Session):
        self.db = db

    def get_int(self, key: str, default: int) -> int:
        row = self.db.get(SystemConfig, key)
        if row is None or row.value is None:
            log.debug(f"config key {key!r} not set, using default {default}")
            return default
        return int(row.value)

    def list_all(self) -> Dict[str, Any]:
        rows = self.db.execute(select(SystemConfig).order_by(SystemConfig.key)).scalars().all()
        return {row.key: row.value for row in rows}

    def set_value(self, key: str, value: Any) -> SystemConfig:
        """Upsert one entry; ``token_scope`` must be a positive integer."""
        if key == TOKEN_SCOPE_KEY:
            value = _validate_scope(value)

        insert = dialect_insert(self.db)
        # None is stored as JSON null; the column itself is NOT NULL
        stored = JSON.NULL if value is None else value
        stmt = insert(SystemConfig).values(key=key, value=stored)
        stmt = stmt.on_conflict_do_update(
            index_elements=[SystemConfig.key],
            set_={"value": stmt.excluded.value, "updated_at": func.now()},
        )
        self.db.execute(stmt)
        self.db.commit()

        log.info(f"config.updated key={key} value={value!r}")
        return self.db.execute(
            select(SystemConfig).where(SystemConfig.key == key).execution_options(populate_existing=True)
        ).scalar_one()


def _validate_scope(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigValueError(f"{TOKEN_SCOPE_KEY} must be a positive integer, got {value!r}")
    return value


def resolve_token_scope(store: ConfigStore) -> int:
    """How many top-ranked tokens the next run requests.

    A missing key is the normal first-run state and yields the default.
    """
    return store.get_int(TOKEN_SCOPE_KEY, DEFAULT_TOKEN_SCOPE)
