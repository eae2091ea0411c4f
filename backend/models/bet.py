from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

BET_STATUS_PENDING = "pending"
BET_STATUS_WON = "won"
BET_STATUS_LOST = "lost"


class Bet(Base):
    """A user's win bet on one runner."""

    __tablename__ = "bets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    race_id: Mapped[str] = mapped_column(String(64), nullable=False)
    race_date: Mapped[str] = mapped_column(String(10), nullable=False)
    course: Mapped[str] = mapped_column(String(128), nullable=False)
    off_time: Mapped[str] = mapped_column(String(8), nullable=False)
    horse_id: Mapped[str] = mapped_column(String(64), nullable=False)
    horse_name: Mapped[str] = mapped_column(String(128), nullable=False)
    trainer_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    jockey_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    current_odds: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    odds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # decimal
    bet_amount: Mapped[float] = mapped_column(Float, nullable=False)
    bet_type: Mapped[str] = mapped_column(String(16), nullable=False, default="win")
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=BET_STATUS_PENDING
    )
    potential_return: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "race_id": self.race_id,
            "race_date": self.race_date,
            "course": self.course,
            "off_time": self.off_time,
            "horse_id": self.horse_id,
            "horse_name": self.horse_name,
            "trainer_name": self.trainer_name,
            "jockey_name": self.jockey_name,
            "current_odds": self.current_odds,
            "odds": self.odds,
            "bet_amount": self.bet_amount,
            "bet_type": self.bet_type,
            "status": self.status,
            "potential_return": self.potential_return,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
