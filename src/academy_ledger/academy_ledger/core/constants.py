"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

RECENT_LESSON_LIMIT = 10
RECENT_TEST_LIMIT = 10
RECENT_WINDOW_DAYS = 7
RECENT_ITEMS_CAP = 20
SCORE_DIGITS = 2
MIN_STATS_YEAR = 2000
MAX_STATS_YEAR = 2100
