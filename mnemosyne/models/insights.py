"""
Model definitions for derived mood insights.

These are plain value objects returned by the correlation engine and the
insight services, ready to be serialized for the presentation layer.
"""
from enum import Enum
from datetime import date
from typing import List
from pydantic import BaseModel, computed_field

from mnemosyne.services.constants import (
    PHASE_DIFFERENCE_THRESHOLD,
    STRONG_CORRELATION_THRESHOLD,
    WEEKDAY_NAMES
)

class TrendDirection(str, Enum):
    """
    Direction label for a trend slope.
    """
    UP = "up"
    DOWN = "down"
    STABLE = "stable"

class TimeOfDay(str, Enum):
    """
    Fixed time-of-day bins used for timing insights.
    """
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

class TimeRange(str, Enum):
    """
    Named look-back windows for insight screens.
    """
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    ALL = "all"

class MoodStatistics(BaseModel):
    """
    Summary statistics over mood scores. All zero for no entries.
    """
    average: float = 0.0
    standard_deviation: float = 0.0
    min: float = 0.0
    max: float = 0.0

class DayMoodData(BaseModel):
    """
    Aggregated mood for one calendar day.
    """
    date: date
    average_mood: float
    entry_count: int
    tags: List[str]

class CycleDayMoodData(BaseModel):
    """
    Aggregated mood for one cycle day across all cycles.
    """
    cycle_day: int
    average_mood: float
    entry_count: int
    is_stop_week: bool

class WeekdayMoodData(BaseModel):
    """
    Aggregated mood for one day of the week (ISO numbering, 1 = Monday).
    """
    weekday: int
    average_mood: float
    entry_count: int

    @computed_field
    @property
    def weekday_name(self) -> str:
        return WEEKDAY_NAMES[self.weekday]

class TimeOfDayMoodData(BaseModel):
    """
    Aggregated mood for one time-of-day bin.
    """
    time_of_day: TimeOfDay
    hour: int  # Representative hour for charting
    average_mood: float
    entry_count: int

class TagCorrelation(BaseModel):
    """
    Heuristic association between a tag and mood.

    ``correlation`` is the tag's average deviation from the overall average
    divided by 5 and clamped to -1..1. It is not a statistical correlation
    coefficient and carries no significance.
    """
    tag: str
    average_mood: float
    occurrences: int
    correlation: float

    @property
    def is_positive_correlation(self) -> bool:
        return self.correlation > 0

    @computed_field
    @property
    def strength(self) -> str:
        """Bucket used by the UI to color a tag."""
        if self.correlation > STRONG_CORRELATION_THRESHOLD:
            return "strong_positive"
        elif self.correlation > 0:
            return "positive"
        elif self.correlation > -STRONG_CORRELATION_THRESHOLD:
            return "negative"
        return "strong_negative"

class PhaseComparison(BaseModel):
    """
    Mood during pill weeks compared with mood during stop weeks.
    """
    pill_week_average: float
    stop_week_average: float
    pill_week_entries: int
    stop_week_entries: int

    @computed_field
    @property
    def difference(self) -> float:
        """Stop week average minus pill week average."""
        return self.stop_week_average - self.pill_week_average

    @computed_field
    @property
    def is_significant(self) -> bool:
        """Differences of half a point or less are not surfaced."""
        return abs(self.difference) > PHASE_DIFFERENCE_THRESHOLD

    @computed_field
    @property
    def has_data(self) -> bool:
        return self.pill_week_entries > 0 or self.stop_week_entries > 0

class PMSPattern(BaseModel):
    """
    Mood in the days before the stop week compared with other pill days.
    """
    pms_average: float
    normal_average: float
    mood_drop: float
    detected: bool

class WeekdayExtremes(BaseModel):
    """
    Best and most difficult day of the week.
    """
    best: WeekdayMoodData
    worst: WeekdayMoodData

class TagSummary(BaseModel):
    """
    Strongest vocabulary-positive and vocabulary-negative tags.
    """
    positive: List[TagCorrelation]
    negative: List[TagCorrelation]

    @property
    def is_empty(self) -> bool:
        return not self.positive and not self.negative

