"""
SQLAlchemy models for persistent storage.

The monitor keeps exactly one row: the current tracking/alert state.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class AlertStateRecord(Base):
    """Single-row table holding the latch flags and the tracked event slug"""

    __tablename__ = "alert_state"

    STATE_ID = 1

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=STATE_ID)
    tracked_slug: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    warn_triggered: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)
    crit_triggered: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)
    last_daily_status_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    last_probability: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<AlertStateRecord slug={self.tracked_slug!r} warn={self.warn_triggered} "
            f"crit={self.crit_triggered} updated_at={self.updated_at}>"
        )
