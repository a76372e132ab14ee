"""
Constants and shared data for mood and cycle analytics.
"""
from typing import Dict, List, Tuple

# Mood score range
MOOD_MIN_SCORE = -5.0
MOOD_MAX_SCORE = 5.0
NEUTRAL_SCORE = 0.0

MOOD_LABELS: List[Tuple[float, float, str]] = [
    (-5.0, -3.0, "very unpleasant"),
    (-3.0, -1.0, "unpleasant"),
    (-1.0, 1.0, "neutral"),
    (1.0, 3.0, "pleasant"),
    (3.0, 5.0, "very pleasant"),
]

# Divisor mapping a tag's deviation from the overall average onto -1..1
CORRELATION_NORMALIZER = 5.0
STRONG_CORRELATION_THRESHOLD = 0.3

# Cycle
PMS_WINDOW_DAYS = 7
DEFAULT_PREDICTION_COUNT = 3
MIN_CYCLE_LENGTH = 2
PHASE_DIFFERENCE_THRESHOLD = 0.5
PMS_DROP_THRESHOLD = -0.5

# Trend
DEFAULT_TREND_DAYS = 7
STABLE_TREND_THRESHOLD = 0.1
DEFAULT_DAILY_SERIES_DAYS = 30

# Flow labels mapped onto an ordinal intensity; "none" has no intensity
FLOW_INTENSITY: Dict[str, int] = {
    "spotting": 1,
    "light": 2,
    "medium": 3,
    "heavy": 4,
}

# (time of day, first hour, end hour exclusive); night is every other hour
TIME_OF_DAY_BINS: List[Tuple[str, int, int]] = [
    ("morning", 5, 12),
    ("afternoon", 12, 17),
    ("evening", 17, 21),
]
NIGHT = "night"

TIME_OF_DAY_HOURS: Dict[str, int] = {
    "morning": 8,
    "afternoon": 14,
    "evening": 19,
    "night": 23,
}

WEEKDAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}

# Named insight ranges in days, None meaning all entries
TIME_RANGE_DAYS = {
    "week": 7,
    "month": 30,
    "quarter": 90,
    "all": None,
}

NEGATIVE_TAGS: List[str] = [
    "Headache",
    "Stomach ache",
    "Slept badly",
    "Stress/tension",
    "Emotional/crying",
    "Tired/exhausted",
    "Argument/conflict",
    "Negative body image",
    "Nausea",
    "Bloated",
]

POSITIVE_TAGS: List[str] = [
    "Energetic",
    "Social contact",
    "Productive day",
    "Slept well",
    "Exercised",
    "Drank enough water",
    "Intimate moments",
]

ALL_TAGS: List[str] = NEGATIVE_TAGS + POSITIVE_TAGS
