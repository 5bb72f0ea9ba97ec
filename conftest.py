import pytest
from datetime import datetime, timezone


class MemoryProgressStore:
    """Stand-in for SqlProgressStore so API tests run without a database."""

    def __init__(self):
        self.progress: dict[str, dict[int, float]] = {}
        self.events: dict[str, list[dict]] = {}

    async def weekly_progress(self, subject_id):
        weeks = self.progress.get(subject_id, {})
        return [weeks[w] for w in sorted(weeks)]

    async def record_progress(self, subject_id, week_number, change_kg):
        self.progress.setdefault(subject_id, {})[week_number] = change_kg

    async def save_events(self, subject_id, events):
        for e in events:
            self.events.setdefault(subject_id, []).append({
                "timestamp": e.timestamp,
                "kind": e.kind.value,
                "feedback": (
                    {"difficulty": e.feedback.difficulty.value, "recovery": e.feedback.recovery.value}
                    if e.feedback else None
                ),
                "progress": (
                    {"weight_change": e.progress.weight_change, "target": e.progress.target}
                    if e.progress else None
                ),
                "adjustments": dict(e.adjustments),
            })

    async def list_events(self, subject_id, limit=None):
        events = list(reversed(self.events.get(subject_id, [])))
        return events[:limit] if limit else events


@pytest.fixture
def fixed_clock():
    moment = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    return lambda: moment


@pytest.fixture
def store():
    return MemoryProgressStore()


@pytest.fixture
def client(store):
    from fastapi.testclient import TestClient
    from main import app
    from progress_store import get_progress_store

    app.dependency_overrides[get_progress_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
