"""
Types for plan learning stats.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class LearningStats:
    """
    Dashboard counters for one plan at one instant.
    """
    due_today: int
    reviewed_today: int
    total_learned: int
    by_status: dict[str, int] = field(default_factory=dict)
    by_pool: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class LearnedUnit:
    """A graduated unit, as listed on the learned-items view."""
    unit_id: str
    kind: str
    pool: str
    interval: float
    due_date: Optional[datetime]
    last_reviewed_at: Optional[datetime]
