"""
FitEstimate — Progress Store
Persistence for weekly progress samples and adaptation events. The engines
never touch this; routes read history from it and write audit events back.
"""

from dataclasses import asdict
from typing import Optional

from fastapi import Depends
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from database import get_db
from fitness_types import AdaptationEvent
from models import AdaptationEventRecord, WeeklyProgressRecord

log = logging.getLogger(__name__)


def event_to_record(subject_id: str, event: AdaptationEvent) -> AdaptationEventRecord:
    return AdaptationEventRecord(
        subject_id=subject_id,
        occurred_at=event.timestamp,
        kind=event.kind.value,
        feedback=(
            {"difficulty": event.feedback.difficulty.value, "recovery": event.feedback.recovery.value}
            if event.feedback else None
        ),
        progress=asdict(event.progress) if event.progress else None,
        adjustments=dict(event.adjustments),
    )


class SqlProgressStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def weekly_progress(self, subject_id: str) -> list[float]:
        """Samples in chronological (week number) order."""
        result = await self.db.execute(
            select(WeeklyProgressRecord.change_kg)
            .where(WeeklyProgressRecord.subject_id == subject_id)
            .order_by(WeeklyProgressRecord.week_number)
        )
        return [float(v) for v in result.scalars().all()]

    async def record_progress(self, subject_id: str, week_number: int, change_kg: float) -> None:
        # Upsert (overwrite if the week already exists)
        existing = await self.db.execute(
            select(WeeklyProgressRecord).where(
                WeeklyProgressRecord.subject_id == subject_id,
                WeeklyProgressRecord.week_number == week_number,
            )
        )
        row = existing.scalar_one_or_none()
        if row:
            row.change_kg = change_kg
        else:
            self.db.add(WeeklyProgressRecord(subject_id=subject_id, week_number=week_number, change_kg=change_kg))
        await self.db.flush()

    async def save_events(self, subject_id: str, events: list[AdaptationEvent]) -> None:
        for event in events:
            self.db.add(event_to_record(subject_id, event))
        await self.db.flush()
        log.debug(f"Stored {len(events)} adaptation event(s) for {subject_id}")

    async def list_events(self, subject_id: str, limit: Optional[int] = None) -> list[dict]:
        query = (
            select(AdaptationEventRecord)
            .where(AdaptationEventRecord.subject_id == subject_id)
            .order_by(desc(AdaptationEventRecord.occurred_at))
        )
        if limit:
            query = query.limit(limit)
        rows = (await self.db.execute(query)).scalars().all()
        return [
            {
                "timestamp": r.occurred_at,
                "kind": r.kind,
                "feedback": r.feedback,
                "progress": r.progress,
                "adjustments": r.adjustments,
            }
            for r in rows
        ]


async def get_progress_store(db: AsyncSession = Depends(get_db)) -> SqlProgressStore:
    """FastAPI dependency; override it to plug in another store."""
    return SqlProgressStore(db)
