"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest

from practice_core.plan_store import InMemoryPlanStore
from practice_core.service import PracticeService

# Wednesday
NOW = datetime(2024, 3, 6, 15, 30, tzinfo=timezone.utc)


def unit(unit_id, **fields):
    """Stored unit document."""
    return {"id": unit_id, **fields}


def schedule(interval, due_date, repetition=0, ease_factor=2.5):
    return {
        "interval": interval,
        "dueDate": due_date,
        "repetition": repetition,
        "easeFactor": ease_factor,
    }


def make_plan_document(**overrides):
    """
    A plan with:
    - lesson-1 (this week): items a, b; structure s1
    - lesson-0 (previous week): item old
    - review queue: rq (due), rq-later (not due)
    - mastered: m (due), m-later (not due)
    """
    document = {
        "_id": "plan-1",
        "studentId": "student-1",
        "status": "active",
        "lessons": [
            {
                "id": "lesson-0",
                "title": "Greetings",
                "scheduledDate": "2024-02-26T10:00:00Z",
                "items": [unit("old")],
                "structures": [],
            },
            {
                "id": "lesson-1",
                "title": "At the market",
                "scheduledDate": "2024-03-04T10:00:00Z",
                "items": [unit("a"), unit("b")],
                "structures": [unit("s1")],
            },
        ],
        "reviewQueue": {
            "rq": unit("rq", srsData=schedule(3, "2024-03-05T08:00:00Z", repetition=2)),
            "rq-later": unit("rq-later", srsData=schedule(6, "2024-03-09T08:00:00Z", repetition=2)),
        },
        "mastered": {
            "m": unit("m", kind="structure", srsData=schedule(7, "2024-03-06T23:00:00Z", repetition=3)),
            "m-later": unit("m-later", srsData=schedule(14, "2024-03-20T00:00:00Z", repetition=4)),
        },
    }
    document.update(overrides)
    return document


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def plan_document():
    return make_plan_document()


@pytest.fixture
def store(plan_document):
    store = InMemoryPlanStore(max_retries=3)
    store.put(plan_document)
    return store


@pytest.fixture
def service(store):
    return PracticeService(store, clock=lambda: NOW)
