"""
Analytics package exports.
"""

from practice_core.analytics.service import build_learning_stats, list_learned_units
from practice_core.analytics.types import LearnedUnit, LearningStats

__all__ = [
    "build_learning_stats",
    "list_learned_units",
    "LearnedUnit",
    "LearningStats",
]
