"""
Daily Practice Selector

Assembles today's practice set for a plan from two sources:
1. New units: every item and structure of the lessons scheduled in the
   current calendar week (ISO week containing now)
2. Review units: units of the Review-Queue and Mastered pools that are due

Selection is read-only; the plan is never mutated here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from loguru import logger

from practice_core.instants import in_same_week
from practice_core.pools import ACTIVE, MASTERED, REVIEW_QUEUE, PoolName
from practice_core.schemas import LearningUnit, Plan, UnitKind
from practice_core.scheduling import is_due


@dataclass(frozen=True)
class PracticeUnit:
    """
    A unit selected for practice, tagged with where it came from.
    """
    unit: LearningUnit
    kind: str
    pool: PoolName
    lesson_id: Optional[str] = None

    @property
    def unit_id(self) -> str:
        return self.unit.id


@dataclass(frozen=True)
class DailyPractice:
    """Today's practice set."""
    new_units: list[PracticeUnit] = field(default_factory=list)
    review_units: list[PracticeUnit] = field(default_factory=list)

    @property
    def unit_ids(self) -> list[str]:
        return [u.unit_id for u in self.new_units] + [u.unit_id for u in self.review_units]

    def __len__(self) -> int:
        return len(self.new_units) + len(self.review_units)


def lessons_this_week(plan: Plan, now: datetime) -> list:
    """
    Lessons whose scheduled date falls in the calendar week containing now.

    Lessons without a (parseable) scheduled date are never selected.
    """
    return [
        lesson for lesson in plan.lessons
        if lesson.scheduled_date is not None and in_same_week(lesson.scheduled_date, now)
    ]


def collect_new_units(plan: Plan, now: datetime) -> list[PracticeUnit]:
    new_units: list[PracticeUnit] = []
    for lesson in lessons_this_week(plan, now):
        for unit in lesson.items:
            new_units.append(PracticeUnit(unit, UnitKind.ITEM.value, ACTIVE, lesson.id))
        for unit in lesson.structures:
            new_units.append(PracticeUnit(unit, UnitKind.STRUCTURE.value, ACTIVE, lesson.id))
    return new_units


def collect_due_units(plan: Plan, now: datetime) -> list[PracticeUnit]:
    """
    Due units from the Review-Queue pool, then the Mastered pool.
    """
    due_units: list[PracticeUnit] = []
    for pool_name, pool in ((REVIEW_QUEUE, plan.review_queue), (MASTERED, plan.mastered)):
        for unit in pool.values():
            if is_due(unit.schedule, now):
                due_units.append(PracticeUnit(unit, unit.kind, pool_name))
    return due_units


def select_daily_practice(plan: Plan, now: datetime) -> DailyPractice:
    """
    Build today's practice set for a plan snapshot.

    Args:
        plan: Plan snapshot (not mutated)
        now: Current instant

    Returns:
        DailyPractice with new_units and review_units
    """
    practice = DailyPractice(
        new_units=collect_new_units(plan, now),
        review_units=collect_due_units(plan, now),
    )
    logger.info(
        "Daily practice for plan {}: {} new, {} due for review",
        plan.id, len(practice.new_units), len(practice.review_units),
    )
    return practice
