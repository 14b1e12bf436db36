"""
Metric computations over a plan's unit table.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from practice_core.instants import start_of_day
from practice_core.pools import ACTIVE, MASTERED, REVIEW_QUEUE
from practice_core.schemas import Plan


UNIT_COLUMNS = ["unit_id", "kind", "pool", "lesson_id", "interval", "status", "due_date", "last_reviewed_at"]


def build_units_df(plan: Plan) -> pd.DataFrame:
    """
    Flatten every unit of the plan into one row per unit.

    Date columns are UTC timestamps (NaT when absent).
    """
    rows = []
    for lesson in plan.lessons:
        for unit in list(lesson.items) + list(lesson.structures):
            rows.append(_row(unit, ACTIVE, lesson.id))
    for pool_name, pool in ((REVIEW_QUEUE, plan.review_queue), (MASTERED, plan.mastered)):
        for unit in pool.values():
            rows.append(_row(unit, pool_name, None))

    if not rows:
        return pd.DataFrame(columns=UNIT_COLUMNS)

    df = pd.DataFrame(rows, columns=UNIT_COLUMNS)
    df["due_date"] = pd.to_datetime(df["due_date"], utc=True, errors="coerce")
    df["last_reviewed_at"] = pd.to_datetime(df["last_reviewed_at"], utc=True, errors="coerce")
    return df


def _row(unit, pool: str, lesson_id) -> dict:
    schedule = unit.schedule
    return {
        "unit_id": unit.id,
        "kind": unit.kind,
        "pool": pool,
        "lesson_id": lesson_id,
        "interval": schedule.interval if schedule else None,
        "status": schedule.status if schedule else None,
        "due_date": schedule.due_date if schedule else None,
        "last_reviewed_at": unit.last_reviewed_at,
    }


def _day_floor(column: pd.Series) -> pd.Series:
    return column.dt.floor("D")


def compute_due_today(units_df: pd.DataFrame, now: datetime) -> int:
    """
    Count units due on or before today's calendar day, across all pools.
    """
    if units_df.empty:
        return 0
    today = pd.Timestamp(start_of_day(now))
    due_days = _day_floor(units_df["due_date"])
    return int((due_days.notna() & (due_days <= today)).sum())


def compute_reviewed_today(units_df: pd.DataFrame, now: datetime) -> int:
    if units_df.empty:
        return 0
    today = pd.Timestamp(start_of_day(now))
    return int((_day_floor(units_df["last_reviewed_at"]) == today).sum())


def compute_total_learned(units_df: pd.DataFrame) -> int:
    """Graduated units: everything in the Review-Queue and Mastered pools."""
    if units_df.empty:
        return 0
    return int(units_df["pool"].isin([REVIEW_QUEUE, MASTERED]).sum())


def count_by(units_df: pd.DataFrame, column: str) -> dict[str, int]:
    if units_df.empty:
        return {}
    counts = units_df[column].dropna().value_counts()
    return {str(key): int(value) for key, value in counts.items()}
