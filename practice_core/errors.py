"""
Error taxonomy for the practice engine.
"""

from __future__ import annotations

from typing import Any, Optional


class PracticeError(Exception):
    """Base class for all practice engine errors."""


class PlanNotFoundError(PracticeError):
    """The referenced plan does not exist. Not retried."""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Plan not found: {plan_id}")


class InvalidGradeError(PracticeError, ValueError):
    """A grade outside the accepted ordinal range. Not retried."""

    def __init__(self, grade: Any, unit_id: Optional[str] = None):
        self.grade = grade
        self.unit_id = unit_id
        where = f" for unit {unit_id}" if unit_id else ""
        super().__init__(f"Invalid grade{where}: {grade!r}")


class TransactionConflictError(PracticeError):
    """
    A plan transaction could not commit after the store's retry policy.

    Callers may retry the whole operation.
    """

    retriable = True

    def __init__(self, plan_id: str, attempts: Optional[int] = None):
        self.plan_id = plan_id
        self.attempts = attempts
        detail = f" after {attempts} attempts" if attempts else ""
        super().__init__(f"Transaction on plan {plan_id} could not commit{detail}")
