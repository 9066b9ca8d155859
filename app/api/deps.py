"""API dependencies"""

import secrets
from typing import Callable, Iterator, Optional

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_session
from app.core.logging import get_logger
from app.ingestion.base import BaseListingSource
from app.ingestion.cmc_client import CMCClient

log = get_logger("api.deps")


def get_db() -> Iterator[Session]:
    """Database dependency"""
    yield from get_session()


def get_listing_source_factory() -> Callable[[], BaseListingSource]:
    """Factory for the listing provider; building it can fail (missing API key)."""
    return CMCClient


def require_admin(x_admin_secret: Optional[str] = Header(default=None)) -> None:
    """Reject requests whose ``x-admin-secret`` does not match ``ADMIN_API_SECRET``."""
    expected = settings.ADMIN_API_SECRET
    if not expected or not x_admin_secret or not secrets.compare_digest(x_admin_secret, expected):
        log.warning("admin.unauthorized")
        raise HTTPException(status_code=401, detail="Unauthorized")
