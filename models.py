"""
FitEstimate — ORM Models
Weekly progress history and the adaptation audit log, keyed by the external
auth provider's subject id.
"""

from sqlalchemy import String, Integer, Float, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from database import Base
import datetime


class WeeklyProgressRecord(Base):
    __tablename__ = "weekly_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)

    # kg change in the week (positive = progress towards goal)
    change_kg: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        UniqueConstraint("subject_id", "week_number", name="uq_subject_week_progress"),
    )


class AdaptationEventRecord(Base):
    __tablename__ = "adaptation_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    occurred_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)

    feedback: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    progress: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    adjustments: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
