"""
Service layer to assemble plan learning stats.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from practice_core.analytics.metrics import (
    build_units_df,
    compute_due_today,
    compute_reviewed_today,
    compute_total_learned,
    count_by,
)
from practice_core.analytics.types import LearnedUnit, LearningStats
from practice_core.pools import MASTERED, REVIEW_QUEUE
from practice_core.schemas import Plan


def build_learning_stats(plan: Plan, now: datetime) -> LearningStats:
    """
    Compute dashboard counters for a plan snapshot.
    """
    units_df = build_units_df(plan)
    return LearningStats(
        due_today=compute_due_today(units_df, now),
        reviewed_today=compute_reviewed_today(units_df, now),
        total_learned=compute_total_learned(units_df),
        by_status=count_by(units_df, "status"),
        by_pool=count_by(units_df, "pool"),
    )


def list_learned_units(plan: Plan) -> list[LearnedUnit]:
    """
    Every graduated unit, most recently reviewed first (never-reviewed last).
    """
    units_df = build_units_df(plan)
    if units_df.empty:
        return []

    learned = units_df[units_df["pool"].isin([REVIEW_QUEUE, MASTERED])]
    learned = learned.sort_values("last_reviewed_at", ascending=False, na_position="last", kind="stable")

    return [
        LearnedUnit(
            unit_id=row.unit_id,
            kind=row.kind,
            pool=row.pool,
            interval=float(row.interval) if pd.notna(row.interval) else 0.0,
            due_date=_to_datetime(row.due_date),
            last_reviewed_at=_to_datetime(row.last_reviewed_at),
        )
        for row in learned.itertuples(index=False)
    ]


def _to_datetime(value):
    if pd.isna(value):
        return None
    return value.to_pydatetime()
