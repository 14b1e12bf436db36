"""
SM-2 Scheduler - Algorithm Logic

Pure SM-2 scheduling (no database calls, no clock reads).

Rules:
- Passing grade: interval grows 1 -> 6 -> round(interval * EF)
- Failing grade: repetition streak resets, unit is due again the same day
- Ease factor: EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3
"""

from __future__ import annotations

import math
import numbers
from datetime import datetime
from typing import Any, Optional

from practice_core.errors import InvalidGradeError
from practice_core.instants import add_days, to_instant
from practice_core.schemas import ScheduleState, SrsStatus
from practice_core.scheduling.constants import (
    DEFAULT_EASE_FACTOR,
    FIRST_INTERVAL,
    LEARNED_INTERVAL,
    MASTERED_INTERVAL,
    MAX_GRADE,
    MIN_EASE_FACTOR,
    MIN_GRADE,
    PASSING_GRADE,
    RELEARN_INTERVAL,
    SECOND_INTERVAL,
)


def validate_grade(grade: Any, unit_id: Optional[str] = None) -> int:
    """
    Validate a grade and return it as an int.

    Accepts ints and integral floats in [MIN_GRADE, MAX_GRADE].
    Booleans, NaN, infinities, fractions and non-numbers are rejected.

    Raises:
        InvalidGradeError: If the grade is malformed or out of range
    """
    if isinstance(grade, bool) or not isinstance(grade, numbers.Real):
        raise InvalidGradeError(grade, unit_id)
    value = float(grade)
    if not math.isfinite(value) or not value.is_integer():
        raise InvalidGradeError(grade, unit_id)
    if not MIN_GRADE <= value <= MAX_GRADE:
        raise InvalidGradeError(grade, unit_id)
    return int(value)


def status_for_interval(interval: float) -> SrsStatus:
    if interval < LEARNED_INTERVAL:
        return SrsStatus.LEARNING
    if interval < MASTERED_INTERVAL:
        return SrsStatus.LEARNED
    return SrsStatus.MASTERED


def update_ease_factor(ease_factor: float, grade: int) -> float:
    """
    Apply the SM-2 ease update for a grade.

    Args:
        ease_factor: Current ease factor
        grade: Validated grade (0-5)

    Returns:
        New ease factor, never below MIN_EASE_FACTOR
    """
    miss = MAX_GRADE - grade
    new_ease = ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
    return max(MIN_EASE_FACTOR, new_ease)


def next_state(
    grade: Any,
    previous: Optional[ScheduleState],
    now: datetime
) -> ScheduleState:
    """
    Compute the next schedule state for a graded unit.

    Deterministic given (grade, previous, now). A missing previous state is
    a first exposure and starts from the baseline (interval 0, default ease).

    Args:
        grade: Recall quality, 0-5
        previous: Current schedule state, or None if never graded
        now: Grading instant

    Returns:
        New ScheduleState with due_date = now + interval

    Raises:
        InvalidGradeError: If the grade is malformed
    """
    grade = validate_grade(grade)
    now = to_instant(now)

    if previous is None:
        interval = RELEARN_INTERVAL
        repetition = 0
        ease_factor = DEFAULT_EASE_FACTOR
    else:
        interval = previous.interval or 0.0
        repetition = previous.repetition or 0
        ease_factor = previous.ease_factor or DEFAULT_EASE_FACTOR

    if grade >= PASSING_GRADE:
        if repetition == 0:
            interval = FIRST_INTERVAL
        elif repetition == 1:
            interval = SECOND_INTERVAL
        else:
            interval = float(round(interval * ease_factor))
        repetition += 1
    else:
        # Failed recall: relearn from scratch
        repetition = 0
        interval = RELEARN_INTERVAL

    ease_factor = update_ease_factor(ease_factor, grade)

    return ScheduleState(
        interval=interval,
        due_date=add_days(now, interval),
        repetition=repetition,
        ease_factor=ease_factor,
        status=status_for_interval(interval),
    )
