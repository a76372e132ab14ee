"""
Insight services built on top of the correlation engine.

These functions turn engine series into the comparisons shown on the
insight screens: pill week versus stop week mood, PMS pattern detection,
best and worst weekday and the strongest vocabulary tags.
"""
from typing import Iterable, List, Optional, Sequence
from datetime import datetime, timedelta

from mnemosyne.models.entry import MoodEntry
from mnemosyne.models.insights import (
    CycleDayMoodData,
    PhaseComparison,
    PMSPattern,
    TagCorrelation,
    TagSummary,
    TimeRange,
    WeekdayExtremes,
    WeekdayMoodData
)
from mnemosyne.services.constants import (
    NEGATIVE_TAGS,
    PMS_DROP_THRESHOLD,
    PMS_WINDOW_DAYS,
    POSITIVE_TAGS,
    TIME_RANGE_DAYS
)

def _weighted_average(days: Iterable[CycleDayMoodData]) -> tuple[float, int]:
    """Entry-weighted average of per-day averages and the entry total."""
    total = 0.0
    count = 0
    for day in days:
        total += day.average_mood * day.entry_count
        count += day.entry_count
    return (total / count if count else 0.0), count

def compare_cycle_phases(cycle_data: Sequence[CycleDayMoodData]) -> PhaseComparison:
    """
    Compare average mood during pill weeks and stop weeks.

    Args:
        cycle_data: Output of calculate_cycle_mood_data

    Returns:
        PhaseComparison with entry-weighted averages; a side without
        entries averages 0.0
    """
    pill_average, pill_count = _weighted_average(
        d for d in cycle_data if not d.is_stop_week and d.entry_count > 0
    )
    stop_average, stop_count = _weighted_average(
        d for d in cycle_data if d.is_stop_week and d.entry_count > 0
    )
    return PhaseComparison(
        pill_week_average=pill_average,
        stop_week_average=stop_average,
        pill_week_entries=pill_count,
        stop_week_entries=stop_count
    )

def detect_pms_pattern(cycle_data: Sequence[CycleDayMoodData], stop_week_start: int) -> PMSPattern:
    """
    Detect a mood drop in the days before the stop week.

    PMS days run from PMS_WINDOW_DAYS before the stop week (never before
    day 1) to the day before it. Normal days are the remaining pill days.

    Args:
        cycle_data: Output of calculate_cycle_mood_data
        stop_week_start: First stop week day

    Returns:
        PMSPattern; detected when PMS days average more than half a point
        below normal days
    """
    pms_start = max(1, stop_week_start - PMS_WINDOW_DAYS)
    pms_end = stop_week_start - 1

    pms_days = [
        d for d in cycle_data
        if pms_start <= d.cycle_day <= pms_end and d.entry_count > 0
    ]
    normal_days = [
        d for d in cycle_data
        if not d.is_stop_week and not pms_start <= d.cycle_day <= pms_end and d.entry_count > 0
    ]

    pms_average, _ = _weighted_average(pms_days)
    normal_average, _ = _weighted_average(normal_days)
    mood_drop = pms_average - normal_average if pms_days and normal_days else 0.0

    return PMSPattern(
        pms_average=pms_average,
        normal_average=normal_average,
        mood_drop=mood_drop,
        detected=mood_drop < PMS_DROP_THRESHOLD
    )

def find_weekday_extremes(weekday_data: Sequence[WeekdayMoodData]) -> Optional[WeekdayExtremes]:
    """
    Find the best and the most difficult weekday.

    Returns:
        WeekdayExtremes, or None if no weekday has entries
    """
    with_entries = [d for d in weekday_data if d.entry_count > 0]
    if not with_entries:
        return None
    return WeekdayExtremes(
        best=max(with_entries, key=lambda d: d.average_mood),
        worst=min(with_entries, key=lambda d: d.average_mood)
    )

def summarize_tags(correlations: Sequence[TagCorrelation], limit: int = 3) -> TagSummary:
    """
    Pick the strongest tags from the positive and negative vocabularies.

    Args:
        correlations: Output of calculate_tag_correlations
        limit: Maximum tags per side

    Returns:
        TagSummary with positive tags by descending correlation and
        negative tags by ascending correlation
    """
    positive = sorted(
        (c for c in correlations if c.tag in POSITIVE_TAGS),
        key=lambda c: c.correlation,
        reverse=True
    )
    negative = sorted(
        (c for c in correlations if c.tag in NEGATIVE_TAGS),
        key=lambda c: c.correlation
    )
    return TagSummary(positive=positive[:limit], negative=negative[:limit])

def rank_tags_by_frequency(correlations: Sequence[TagCorrelation], limit: int = 8) -> List[TagCorrelation]:
    """Most frequently used tags first."""
    return sorted(correlations, key=lambda c: c.occurrences, reverse=True)[:limit]

def filter_entries_by_range(
    entries: Sequence[MoodEntry],
    time_range: TimeRange,
    now: Optional[datetime] = None
) -> List[MoodEntry]:
    """
    Select entries logged within a named look-back window.

    Args:
        entries: Mood entries to filter
        time_range: Window name; ALL keeps every entry
        now: Reference time, defaults to the current time

    Returns:
        Entries with a timestamp at or after now minus the window length
    """
    days = TIME_RANGE_DAYS[time_range.value]
    if days is None:
        return list(entries)
    if now is None:
        now = datetime.now()
    cutoff = now - timedelta(days=days)
    return [e for e in entries if e.timestamp >= cutoff]
