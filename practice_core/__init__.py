"""
Practice Core - spaced-repetition engine for curriculum plans

Selects each day's practice units for a student's plan and applies graded
results, moving units from their lessons into the long-term review pools.

Quick start:
    from practice_core import PracticeService, InMemoryPlanStore

    service = PracticeService(InMemoryPlanStore())

    # Today's practice set (read-only)
    practice = service.select_daily_practice(plan_id)

    # Grade a batch atomically
    outcome = service.apply_grades(plan_id, [{"unitId": "run_verb", "grade": 5}])
"""

from practice_core.errors import (
    PracticeError,
    PlanNotFoundError,
    InvalidGradeError,
    TransactionConflictError,
)
from practice_core.schemas import (
    LearningUnit,
    Lesson,
    Plan,
    PracticeResult,
    ScheduleState,
    SessionProgress,
    SrsStatus,
    UnitKind,
)
from practice_core.scheduling import ReviewGrade, is_due, next_state
from practice_core.pools import PlanIndex, UnitLocation, check_pool_exclusivity
from practice_core.session_builder import DailyPractice, PracticeUnit, select_daily_practice
from practice_core.grading import GradeOutcome, apply_grades, grade_plan
from practice_core.plan_store import InMemoryPlanStore, PlanStore
from practice_core.service import PracticeService


__all__ = [
    # Service
    "PracticeService",

    # Stores
    "PlanStore",
    "InMemoryPlanStore",

    # Core operations
    "next_state",
    "is_due",
    "select_daily_practice",
    "apply_grades",
    "grade_plan",
    "check_pool_exclusivity",

    # Models
    "Plan",
    "Lesson",
    "LearningUnit",
    "ScheduleState",
    "PracticeResult",
    "SessionProgress",
    "UnitKind",
    "SrsStatus",
    "ReviewGrade",
    "PlanIndex",
    "UnitLocation",
    "DailyPractice",
    "PracticeUnit",
    "GradeOutcome",

    # Errors
    "PracticeError",
    "PlanNotFoundError",
    "InvalidGradeError",
    "TransactionConflictError",
]
