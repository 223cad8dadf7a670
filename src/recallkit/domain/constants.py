"""Centralized constants for the recallkit scheduler.

Algorithm parameters live here so every layer imports from a single source
of truth. They are fixed by the SM-2 variant and are not user-configurable.
"""

# ---------- Grades ----------
MIN_QUALITY = 0
MAX_QUALITY = 4
PASSING_QUALITY = 3  # grades >= this count as a successful recall

# ---------- Ease factor ----------
INITIAL_EASE = 2.5
MIN_EASE = 1.3

# ---------- Intervals (days) ----------
INITIAL_INTERVAL = 1
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
FAILED_INTERVAL = 1

# ---------- Cards ----------
CARD_ID_PREFIX = "card_"
DIFFICULTIES = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY = "medium"

# ---------- Metrics ----------
VOLATILITY_WINDOW = 10
MIN_REVIEWS_FOR_VOLATILITY = 3
