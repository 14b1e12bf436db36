"""
Scheduling - SM-2 spaced repetition for plan units

Quick start:
    from practice_core import scheduling

    state = scheduling.next_state(scheduling.ReviewGrade.GOOD, None, now)
    scheduling.is_due(state, now)
"""

from practice_core.scheduling.constants import (
    ReviewGrade,
    MIN_GRADE,
    MAX_GRADE,
    PASSING_GRADE,
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    GRADUATION_INTERVAL,
    MASTERED_MIN_INTERVAL,
)
from practice_core.scheduling.due import is_due
from practice_core.scheduling.sm2 import (
    next_state,
    status_for_interval,
    update_ease_factor,
    validate_grade,
)


__all__ = [
    # Algorithm
    "next_state",
    "is_due",
    "validate_grade",
    "status_for_interval",
    "update_ease_factor",

    # Enums
    "ReviewGrade",

    # Parameters
    "MIN_GRADE",
    "MAX_GRADE",
    "PASSING_GRADE",
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "GRADUATION_INTERVAL",
    "MASTERED_MIN_INTERVAL",
]
