"""
Plan Store - storage interface for plan documents

The engine needs two capabilities from storage:
- get_plan(plan_id): non-transactional read (daily practice selection)
- with_transaction(plan_id, fn): atomic read-modify-write of one plan

Stores also keep one saved practice session per plan, so an interrupted
session can be resumed.

fn receives a fresh snapshot and returns the updated Plan to persist, or
None for no write. Stores may run fn more than once.

InMemoryPlanStore implements the interface with optimistic concurrency
(per-document version check on commit), for tests and embedded use.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Callable, Optional, Union

from loguru import logger

from practice_core.config import get_tx_max_retries
from practice_core.errors import PlanNotFoundError, TransactionConflictError
from practice_core.schemas import Plan, SessionProgress


TransactionBody = Callable[[Plan], Optional[Plan]]


class PlanStore(ABC):
    """Storage for plan documents."""

    @abstractmethod
    def get_plan(self, plan_id: str) -> Plan:
        """
        Load a plan snapshot.

        Raises:
            PlanNotFoundError: If the plan does not exist
        """

    @abstractmethod
    def with_transaction(self, plan_id: str, fn: TransactionBody) -> bool:
        """
        Run fn against a fresh snapshot and commit its result atomically.

        Returns:
            True if a write was committed, False if fn returned None

        Raises:
            PlanNotFoundError: If the plan does not exist
            TransactionConflictError: If the commit kept conflicting
        """

    @abstractmethod
    def find_active_plan_id(self, student_id: str) -> Optional[str]:
        """Id of the student's active plan, or None."""

    # ---- Session progress ----

    @abstractmethod
    def save_session_progress(self, progress: SessionProgress) -> None:
        """
        Store (replace) the saved session of progress.plan_id.

        Raises:
            PlanNotFoundError: If the plan does not exist
        """

    @abstractmethod
    def get_session_progress(self, plan_id: str) -> Optional[SessionProgress]:
        """Saved session of a plan, or None."""

    @abstractmethod
    def clear_session_progress(self, plan_id: str) -> None:
        """Drop a plan's saved session (no-op when there is none)."""


class InMemoryPlanStore(PlanStore):
    """
    Process-local plan store.

    Documents are held as plain dicts (the stored shape). Each commit bumps
    a per-plan version; a transaction whose snapshot version is stale at
    commit time re-reads and re-runs its body, up to max_retries attempts.
    """

    def __init__(self, max_retries: Optional[int] = None):
        self._documents: dict[str, dict] = {}
        self._versions: dict[str, int] = {}
        self._sessions: dict[str, dict] = {}
        self._lock = threading.Lock()
        self.max_retries = max_retries if max_retries is not None else get_tx_max_retries()

    # ---- Document access ----

    def put(self, plan: Union[Plan, dict]) -> None:
        """Insert or replace a plan document (outside any transaction)."""
        document = plan.to_document() if isinstance(plan, Plan) else deepcopy(plan)
        with self._lock:
            plan_id = document["_id"]
            self._documents[plan_id] = deepcopy(document)
            self._versions[plan_id] = self._versions.get(plan_id, 0) + 1

    def document(self, plan_id: str) -> dict:
        """Raw stored document (a copy)."""
        with self._lock:
            if plan_id not in self._documents:
                raise PlanNotFoundError(plan_id)
            return deepcopy(self._documents[plan_id])

    def version(self, plan_id: str) -> int:
        with self._lock:
            return self._versions.get(plan_id, 0)

    def _snapshot(self, plan_id: str) -> tuple[dict, int]:
        with self._lock:
            if plan_id not in self._documents:
                raise PlanNotFoundError(plan_id)
            return deepcopy(self._documents[plan_id]), self._versions[plan_id]

    # ---- PlanStore ----

    def get_plan(self, plan_id: str) -> Plan:
        document, _ = self._snapshot(plan_id)
        return Plan.from_document(document)

    def with_transaction(self, plan_id: str, fn: TransactionBody) -> bool:
        for attempt in range(1, self.max_retries + 1):
            document, version = self._snapshot(plan_id)
            updated = fn(Plan.from_document(document))
            if updated is None:
                return False

            with self._lock:
                if self._versions.get(plan_id) == version:
                    self._documents[plan_id] = deepcopy(updated.to_document())
                    self._versions[plan_id] = version + 1
                    return True

            logger.debug("Plan {}: write conflict on attempt {}, retrying", plan_id, attempt)

        raise TransactionConflictError(plan_id, self.max_retries)

    def find_active_plan_id(self, student_id: str) -> Optional[str]:
        with self._lock:
            for plan_id, document in self._documents.items():
                if document.get("studentId") == student_id and document.get("status") == "active":
                    return plan_id
        return None

    def save_session_progress(self, progress: SessionProgress) -> None:
        with self._lock:
            if progress.plan_id not in self._documents:
                raise PlanNotFoundError(progress.plan_id)
            self._sessions[progress.plan_id] = progress.to_document()

    def get_session_progress(self, plan_id: str) -> Optional[SessionProgress]:
        with self._lock:
            document = deepcopy(self._sessions.get(plan_id))
        if document is None:
            return None
        return SessionProgress.from_document(document)

    def clear_session_progress(self, plan_id: str) -> None:
        with self._lock:
            self._sessions.pop(plan_id, None)
