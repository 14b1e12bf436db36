"""
Typed pool models for a plan.

A plan holds every unit in exactly one of three pools:
- active: inside a lesson's items/structures (not yet graduated)
- review_queue: graduated, short-term review rotation
- mastered: graduated, long-term rotation

PlanIndex loads a plan into per-slot lessons and per-pool maps, supports prioritized
lookup and migration, and serializes back into the plan's lesson-ordered
shape.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Literal, Optional

from practice_core.schemas import LearningUnit, Lesson, Plan, UnitKind


PoolName = Literal["active", "review_queue", "mastered"]

ACTIVE: PoolName = "active"
REVIEW_QUEUE: PoolName = "review_queue"
MASTERED: PoolName = "mastered"

# Lookup priority when an id is searched across the plan
SEARCH_ORDER: tuple[PoolName, ...] = (ACTIVE, REVIEW_QUEUE, MASTERED)


@dataclass(frozen=True)
class UnitLocation:
    """
    Where a unit lives: its pool and, for active units, its lesson slot.
    """
    pool: PoolName
    unit_id: str
    lesson_id: Optional[str] = None
    kind: Optional[str] = None
    lesson_index: Optional[int] = None
    position: Optional[int] = None


class PlanIndex:
    """
    Arena over one plan snapshot.

    Active units are held per lesson slot (lesson, kind, position), so a
    unit id repeated across lessons keeps one independent unit per slot.
    Graduated slots are emptied in place; to_plan() restores the original
    lesson/item order minus the emptied slots.
    """

    def __init__(self, plan: Plan):
        self._plan = plan.model_copy(deep=True)
        self._slots: list[dict[str, list[Optional[LearningUnit]]]] = [
            {
                UnitKind.ITEM.value: list(lesson.items),
                UnitKind.STRUCTURE.value: list(lesson.structures),
            }
            for lesson in self._plan.lessons
        ]
        self.review_queue: dict[str, LearningUnit] = dict(self._plan.review_queue)
        self.mastered: dict[str, LearningUnit] = dict(self._plan.mastered)

    # ---- Lookup ----

    def _locate_active(self, unit_id: str) -> Optional[UnitLocation]:
        # First occupied slot in lesson order wins
        for lesson_index, slots in enumerate(self._slots):
            for kind, units in slots.items():
                for position, unit in enumerate(units):
                    if unit is not None and unit.id == unit_id:
                        return UnitLocation(
                            pool=ACTIVE,
                            unit_id=unit_id,
                            lesson_id=self._plan.lessons[lesson_index].id,
                            kind=kind,
                            lesson_index=lesson_index,
                            position=position,
                        )
        return None

    def locate(self, unit_id: str) -> Optional[UnitLocation]:
        """
        Find a unit, searching active lessons, then the review queue, then mastered.

        Returns:
            UnitLocation of the first match, or None if the id is unknown
        """
        for pool in SEARCH_ORDER:
            if pool == ACTIVE:
                location = self._locate_active(unit_id)
                if location is not None:
                    return location
            elif pool == REVIEW_QUEUE and unit_id in self.review_queue:
                return UnitLocation(REVIEW_QUEUE, unit_id, kind=self.review_queue[unit_id].kind)
            elif pool == MASTERED and unit_id in self.mastered:
                return UnitLocation(MASTERED, unit_id, kind=self.mastered[unit_id].kind)
        return None

    def get(self, location: UnitLocation) -> LearningUnit:
        if location.pool == ACTIVE:
            return self._slots[location.lesson_index][location.kind][location.position]
        if location.pool == REVIEW_QUEUE:
            return self.review_queue[location.unit_id]
        return self.mastered[location.unit_id]

    # ---- Mutation ----

    def replace(self, location: UnitLocation, unit: LearningUnit) -> None:
        """Update a unit in place, keeping its pool."""
        if location.pool == ACTIVE:
            self._slots[location.lesson_index][location.kind][location.position] = unit
        elif location.pool == REVIEW_QUEUE:
            self.review_queue[location.unit_id] = unit
        else:
            self.mastered[location.unit_id] = unit

    def move_to_mastered(self, location: UnitLocation, unit: LearningUnit) -> None:
        """
        Remove a unit from the located slot and insert it into the Mastered pool.
        """
        if location.pool == ACTIVE:
            self._slots[location.lesson_index][location.kind][location.position] = None
        elif location.pool == REVIEW_QUEUE:
            self.review_queue.pop(location.unit_id, None)
        self.mastered[location.unit_id] = unit

    # ---- Serialization ----

    def to_plan(self) -> Plan:
        """Rebuild the plan from the arena, preserving lesson ordering."""
        lessons: list[Lesson] = []
        for lesson, slots in zip(self._plan.lessons, self._slots):
            rebuilt = lesson.model_copy(update={
                "items": [u for u in slots[UnitKind.ITEM.value] if u is not None],
                "structures": [u for u in slots[UnitKind.STRUCTURE.value] if u is not None],
            })
            lessons.append(rebuilt)
        return self._plan.model_copy(update={
            "lessons": lessons,
            "review_queue": dict(self.review_queue),
            "mastered": dict(self.mastered),
        })


def check_pool_exclusivity(plan: Plan) -> list[str]:
    """
    Find unit ids that appear in more than one location across the plan.

    Returns:
        Sorted list of duplicated ids (empty when the plan is consistent)
    """
    counts: Counter[str] = Counter()
    for lesson in plan.lessons:
        counts.update(unit.id for unit in lesson.items)
        counts.update(unit.id for unit in lesson.structures)
    counts.update(plan.review_queue.keys())
    counts.update(plan.mastered.keys())
    return sorted(unit_id for unit_id, count in counts.items() if count > 1)
