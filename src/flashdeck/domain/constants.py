"""Centralized constants for flashdeck.

All scheduling numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_QUALITY = 5

# Quality assigned to each review button. There is deliberately no quality 4.
QUALITY_HARD = 2
QUALITY_MEDIUM = 3
QUALITY_EASY = 5
PASSING_QUALITY = 3

FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 3
LAPSE_INTERVAL_DAYS = 1

# ---------- Time ----------
MS_PER_DAY = 24 * 60 * 60 * 1000
NEVER_REVIEWED = 0

# ---------- Stats ----------
MASTERED_REPETITIONS = 3
FORECAST_DAYS = 7

# ---------- Storage ----------
DEFAULT_DATA_FILENAME = "decks.json"
