"""
Scheduling Constants and Parameters

All configurable parameters for the SM-2 scheduler and the pool
graduation rule in one place.
"""

from enum import IntEnum


# ---- Grades ----

class ReviewGrade(IntEnum):
    """Recall quality reported for a unit (SM-2 scale)."""
    AGAIN = 0       # Complete blackout
    WRONG = 1       # Incorrect, answer recognized once shown
    HARD_WRONG = 2  # Incorrect, but felt close
    HARD = 3        # Correct with serious difficulty
    GOOD = 4        # Correct after hesitation
    EASY = 5        # Perfect recall


MIN_GRADE = int(ReviewGrade.AGAIN)
MAX_GRADE = int(ReviewGrade.EASY)
PASSING_GRADE = int(ReviewGrade.HARD)  # Grades below this reset the repetition streak


# ---- SM-2 Parameters ----

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3      # Floor against runaway shrinkage
FIRST_INTERVAL = 1.0       # Days after the first passing review
SECOND_INTERVAL = 6.0      # Days after the second consecutive passing review
RELEARN_INTERVAL = 0.0     # Failing review: due again the same day


# ---- Graduation ----
# A unit graduates out of its lesson once its interval reaches
# GRADUATION_INTERVAL; in the Mastered pool its interval is floored at
# MASTERED_MIN_INTERVAL.

GRADUATION_INTERVAL = 1.0
MASTERED_MIN_INTERVAL = 7.0


# ---- Status thresholds (days) ----

LEARNED_INTERVAL = 7.0
MASTERED_INTERVAL = 30.0
