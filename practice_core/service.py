"""
Practice Service - entry points for the enclosing application

Wraps a PlanStore and a clock:
- select_daily_practice(plan_id): today's new and due units (read-only)
- apply_grades(plan_id, results): grade a batch atomically
- learning_stats(plan_id) / learned_units(plan_id): dashboard reads
- save_session_progress / session_progress: resume an interrupted session
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Union

from practice_core import analytics, grading, session_builder
from practice_core.instants import Clock, to_instant, utc_now
from loguru import logger

from practice_core.plan_store import PlanStore
from practice_core.schemas import SessionProgress


class PracticeService:
    """
    Stateless façade over one plan store. Safe to share across requests.
    """

    def __init__(self, store: PlanStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def _now(self) -> datetime:
        return to_instant(self.clock())

    def select_daily_practice(self, plan_id: str) -> session_builder.DailyPractice:
        """
        Raises:
            PlanNotFoundError: If the plan does not exist
        """
        plan = self.store.get_plan(plan_id)
        return session_builder.select_daily_practice(plan, self._now())

    def apply_grades(
        self,
        plan_id: str,
        results: Iterable[grading.ResultInput]
    ) -> grading.GradeOutcome:
        """
        Raises:
            PlanNotFoundError: If the plan does not exist
            InvalidGradeError: If any grade is malformed
            TransactionConflictError: If the store could not commit
        """
        outcome = grading.apply_grades(self.store, plan_id, results, clock=self.clock)
        if outcome.applied:
            # The saved session is spent once its grades are committed
            self.store.clear_session_progress(plan_id)
        return outcome

    def learning_stats(self, plan_id: str) -> analytics.LearningStats:
        plan = self.store.get_plan(plan_id)
        return analytics.build_learning_stats(plan, self._now())

    def learned_units(self, plan_id: str) -> list[analytics.LearnedUnit]:
        plan = self.store.get_plan(plan_id)
        return analytics.list_learned_units(plan)

    def active_plan_id(self, student_id: str) -> Optional[str]:
        return self.store.find_active_plan_id(student_id)

    # ---- Session progress ----

    def save_session_progress(
        self,
        plan_id: str,
        progress: Union[SessionProgress, dict]
    ) -> SessionProgress:
        """
        Save an in-flight session so it can be resumed later.

        Args:
            plan_id: Plan the session belongs to
            progress: SessionProgress or its document form

        Returns:
            The stored progress, stamped with last_updated

        Raises:
            PlanNotFoundError: If the plan does not exist
        """
        if not isinstance(progress, SessionProgress):
            progress = SessionProgress.model_validate({**progress, "planId": plan_id})
        progress = progress.model_copy(update={"plan_id": plan_id, "last_updated": self._now()})
        self.store.save_session_progress(progress)
        logger.debug("Plan {}: saved session at unit {}", plan_id, progress.current_index)
        return progress

    def session_progress(self, plan_id: str) -> Optional[SessionProgress]:
        return self.store.get_session_progress(plan_id)

    def clear_session_progress(self, plan_id: str) -> None:
        self.store.clear_session_progress(plan_id)
