"""Centralized constants for the Cadence scheduler.

All magic numbers and defaults live here so every layer imports from a
single source of truth.
"""

# ---------- SM-2 ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 4
LAPSE_INTERVAL_DAYS = 1
PASSING_RATING = 3

# ---------- Time ----------
MS_PER_DAY = 24 * 60 * 60 * 1000

# ---------- Catalog ----------
ITEM_ID_PREFIX = "card_"
