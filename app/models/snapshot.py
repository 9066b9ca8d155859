"""Append-only daily measurements; (token_id, date) is unique."""

import uuid
from datetime import date as date_type, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class DailySnapshot(Base):
    __tablename__ = "daily_snapshots"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    token_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tokens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # UTC calendar day of the run that wrote the row
    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)

    rank: Mapped[int] = mapped_column(Integer, nullable=False)

    market_cap: Mapped[float | None] = mapped_column(Numeric(asdecimal=False), nullable=True)
    circulating_supply: Mapped[float] = mapped_column(Numeric(asdecimal=False), nullable=False, default=0)
    price_usd: Mapped[float | None] = mapped_column(Numeric(asdecimal=False), nullable=True)
    volume_24h: Mapped[float | None] = mapped_column(Numeric(asdecimal=False), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    __table_args__ = (UniqueConstraint("token_id", "date", name="uq_daily_snapshots_token_date"),)
