from __future__ import annotations

from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class RaceEntry(Base):
    """A runner in a race with raw per-model win scores.

    The ``*_proba`` columns are independent model confidences (0-1) and do not
    sum to 1 across the field; see insights.normalize.
    """

    __tablename__ = "race_entries"

    race_id: Mapped[str] = mapped_column(
        ForeignKey("races.race_id"), primary_key=True
    )
    horse_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    horse_name: Mapped[str] = mapped_column(String(128), nullable=False)
    number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    trainer_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    trainer_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    jockey_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    silk_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    current_odds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # decimal
    opening_odds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # decimal

    ensemble_proba: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    benter_proba: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    mlp_proba: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    rf_proba: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    xgboost_proba: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    horse_win_percentage_at_distance: Mapped[Optional[float]] = mapped_column(
        Float, nullable=True
    )
