from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Race(Base):
    """One race on a racecard.

    ``off_time`` is stored as ``HH:MM`` with afternoon races written as 01:00-09:59
    (see insights.race_time).
    """

    __tablename__ = "races"

    race_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    off_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    course_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    course_name: Mapped[str] = mapped_column(String(128), nullable=False)
    race_class: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    distance: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    field_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    prize: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    surface: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
