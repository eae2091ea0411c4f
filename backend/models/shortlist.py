from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ShortlistEntry(Base):
    """A horse on a user's watchlist."""

    __tablename__ = "shortlist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    horse_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    race_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    horse_name: Mapped[str] = mapped_column(String(128), nullable=False)
    course: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    race_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    current_odds: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    trainer_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    jockey_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "horse_id": self.horse_id,
            "race_id": self.race_id,
            "horse_name": self.horse_name,
            "course": self.course,
            "race_time": self.race_time,
            "current_odds": self.current_odds,
            "trainer_name": self.trainer_name,
            "jockey_name": self.jockey_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
