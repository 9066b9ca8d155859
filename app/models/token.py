"""Token catalog - one row per CoinMarketCap id, upserted by daily ingestion."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType


class Token(Base):
    """Tracked market entity.

    ``cmc_id`` is the reconciliation key and never changes. ``launch_date``
    and ``slug`` are written once at creation; name, symbol, categories,
    chain and ``is_tracked`` are refreshed from every listing the token
    appears in.
    """

    __tablename__ = "tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    cmc_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True, comment="CoinMarketCap identifier")

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    symbol: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    chain: Mapped[str | None] = mapped_column(String(100), nullable=True, comment="Host platform name, null for native coins")
    launch_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    categories: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)

    is_tracked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
