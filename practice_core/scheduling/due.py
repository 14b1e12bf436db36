"""
Due classification for schedule states.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from practice_core.instants import calendar_day, to_instant
from practice_core.schemas import ScheduleState


def is_due(state: Optional[ScheduleState], now: datetime) -> bool:
    """
    Check whether a unit is due for review.

    Compares calendar days only (time of day is ignored): a unit is due
    when its due date falls on or before today.

    Args:
        state: Schedule state, or None for a never-graded unit
        now: Current instant

    Returns:
        True if due, False if not due or the due date is missing/unparseable
    """
    if state is None:
        return False
    due_date = to_instant(state.due_date)
    if due_date is None:
        return False
    return calendar_day(due_date) <= calendar_day(now)
