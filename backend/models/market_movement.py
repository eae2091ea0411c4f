from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class MarketMovementChange(Base):
    """Append-only log of odds observations.

    ``direction`` is ``"in"`` when the price shortened and ``"out"`` when it
    drifted. ``change_pct`` is signed as reported by the feed.
    """

    __tablename__ = "horse_market_movement_changes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    race_id: Mapped[str] = mapped_column(String(64), nullable=False)
    horse_id: Mapped[str] = mapped_column(String(64), nullable=False)
    course: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    off_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    bookmaker: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    direction: Mapped[str] = mapped_column(String(8), nullable=False)
    change_pct: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    initial_odds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    current_odds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        Index("ix_market_change_observed", "observed_at"),
        Index("ix_market_change_horse_race", "horse_id", "race_id"),
    )
