"""
Grade Processor - Pool Migration

Applies a batch of graded results to a plan:

1. Locate each unit (active lessons -> review queue -> mastered)
2. Compute its next schedule state (SM-2)
3. Active units whose interval reaches GRADUATION_INTERVAL graduate into
   the Mastered pool with the interval floored at MASTERED_MIN_INTERVAL;
   all other units are updated in place
4. Stamp last_reviewed_at / updated_at

The whole batch runs inside one plan-store transaction: the plan is
re-read fresh, and either every result is applied or none is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Union

from loguru import logger

from practice_core.instants import Clock, add_days, start_of_day, to_instant, utc_now
from practice_core.plan_store import PlanStore
from practice_core.pools import ACTIVE, PlanIndex, check_pool_exclusivity
from practice_core.schemas import Plan, PracticeResult, ScheduleState
from practice_core.scheduling import (
    GRADUATION_INTERVAL,
    MASTERED_MIN_INTERVAL,
    next_state,
    status_for_interval,
    validate_grade,
)


ResultInput = Union[PracticeResult, dict]


@dataclass
class GradeOutcome:
    """
    Summary of one grading batch.
    """
    applied: bool = False
    updated_ids: list[str] = field(default_factory=list)
    graduated_ids: list[str] = field(default_factory=list)
    skipped_ids: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"applied": self.applied}


def normalize_results(results: Iterable[ResultInput]) -> list[PracticeResult]:
    """
    Coerce raw payloads into PracticeResults and validate every grade.

    Raises:
        InvalidGradeError: If any grade is malformed (nothing is applied)
    """
    normalized: list[PracticeResult] = []
    for result in results:
        if not isinstance(result, PracticeResult):
            result = PracticeResult.model_validate(result)
        validate_grade(result.grade, result.unit_id)
        normalized.append(result)
    return normalized


def graduate_state(state: ScheduleState, now: datetime) -> ScheduleState:
    """
    Floor a graduating unit's interval at MASTERED_MIN_INTERVAL days.

    A floored due date is day-aligned (midnight UTC).
    """
    if state.interval >= MASTERED_MIN_INTERVAL:
        return state
    return state.model_copy(update={
        "interval": MASTERED_MIN_INTERVAL,
        "due_date": add_days(start_of_day(now), MASTERED_MIN_INTERVAL),
        "status": status_for_interval(MASTERED_MIN_INTERVAL).value,
    })


def grade_plan(
    plan: Plan,
    results: list[PracticeResult],
    now: datetime
) -> tuple[Optional[Plan], GradeOutcome]:
    """
    Apply graded results to a plan snapshot (pure, no I/O).

    Results are applied in order; grading the same unit twice applies both
    transitions, the second starting from wherever the first left it.

    Args:
        plan: Fresh plan snapshot
        results: Validated results
        now: Grading instant

    Returns:
        (updated plan or None if no unit matched, outcome)

    Raises:
        InvalidGradeError: If any grade is malformed
    """
    now = to_instant(now)
    duplicated = check_pool_exclusivity(plan)
    if duplicated:
        logger.warning("Plan {}: units stored in more than one place: {}", plan.id, duplicated)
    index = PlanIndex(plan)
    outcome = GradeOutcome()

    for result in results:
        location = index.locate(result.unit_id)
        if location is None:
            logger.warning("Plan {}: unit {} not found, skipping", plan.id, result.unit_id)
            outcome.skipped_ids.append(result.unit_id)
            continue

        unit = index.get(location)
        state = next_state(result.grade, unit.schedule, now)

        graduating = location.pool == ACTIVE and state.interval >= GRADUATION_INTERVAL
        if graduating:
            state = graduate_state(state, now)

        updated = unit.model_copy(update={
            "schedule": state,
            "last_reviewed_at": now,
            "updated_at": now,
        })

        if graduating:
            index.move_to_mastered(location, updated)
            outcome.graduated_ids.append(result.unit_id)
            logger.debug(
                "Plan {}: unit {} graduated from lesson {} (interval {})",
                plan.id, result.unit_id, location.lesson_id, state.interval,
            )
        else:
            index.replace(location, updated)
        outcome.updated_ids.append(result.unit_id)

    if not outcome.updated_ids:
        return None, outcome

    updated_plan = index.to_plan().model_copy(update={"updated_at": now})
    return updated_plan, outcome


def apply_grades(
    store: PlanStore,
    plan_id: str,
    results: Iterable[ResultInput],
    clock: Clock = utc_now
) -> GradeOutcome:
    """
    Grade a batch against the plan store in one atomic transaction.

    The transaction body may run more than once (store retries); it only
    depends on the fresh snapshot it receives, the results and now.

    Args:
        store: Plan store
        plan_id: Plan document id
        results: PracticeResults or {"unitId": ..., "grade": ...} payloads
        clock: Source of now

    Returns:
        GradeOutcome; applied is True when the plan was written

    Raises:
        PlanNotFoundError: If the plan does not exist
        InvalidGradeError: If any grade is malformed
        TransactionConflictError: If the store could not commit
    """
    normalized = normalize_results(results)
    now = to_instant(clock())
    attempts: list[GradeOutcome] = []

    def transaction_body(plan: Plan) -> Optional[Plan]:
        updated_plan, outcome = grade_plan(plan, normalized, now)
        attempts.append(outcome)
        return updated_plan

    committed = store.with_transaction(plan_id, transaction_body)

    outcome = attempts[-1] if attempts else GradeOutcome()
    outcome.applied = bool(committed)
    if outcome.applied:
        logger.info(
            "Plan {}: graded {} units ({} graduated, {} skipped)",
            plan_id, len(outcome.updated_ids), len(outcome.graduated_ids), len(outcome.skipped_ids),
        )
    elif outcome.skipped_ids:
        logger.warning(
            "Plan {}: no unit matched; {} results skipped, nothing written",
            plan_id, len(outcome.skipped_ids),
        )
    return outcome
