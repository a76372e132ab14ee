"""
Correlation engine for mood entries.

This module provides pure aggregation functions over mood entries: summary
statistics, trend slope, per-day, per-cycle-day, per-weekday and
per-time-of-day series, the score distribution and tag correlations.

Every function takes an already loaded collection of entries, does not
modify it and returns a fresh result, so calls can run concurrently on the
same snapshot. Empty input always yields a well-formed empty or zero result.

Typical usage:
    entries = repository.list_entries()
    stats = calculate_statistics(entries)
    slope = calculate_trend(entries)
    correlations = calculate_tag_correlations(entries)
"""
import math
from collections import defaultdict
from typing import Dict, List, Optional, Sequence
from datetime import date, datetime, timedelta

from mnemosyne.models.entry import MoodEntry
from mnemosyne.models.insights import (
    CycleDayMoodData,
    DayMoodData,
    MoodStatistics,
    TagCorrelation,
    TimeOfDay,
    TimeOfDayMoodData,
    TrendDirection,
    WeekdayMoodData
)
from mnemosyne.services.constants import (
    CORRELATION_NORMALIZER,
    DEFAULT_DAILY_SERIES_DAYS,
    DEFAULT_TREND_DAYS,
    MOOD_MAX_SCORE,
    MOOD_MIN_SCORE,
    NIGHT,
    STABLE_TREND_THRESHOLD,
    TIME_OF_DAY_BINS,
    TIME_OF_DAY_HOURS
)
from mnemosyne.services.utils import clamp, day_in_cycle, mean, to_day

def calculate_statistics(entries: Sequence[MoodEntry]) -> MoodStatistics:
    """
    Calculate average, population standard deviation, min and max score.

    Args:
        entries: Mood entries to analyze

    Returns:
        MoodStatistics; every field is 0.0 when there are no entries

    Example:
        >>> stats = calculate_statistics(entries)  # scores -5, 0, 5
        >>> round(stats.standard_deviation, 2)
        4.08
    """
    if not entries:
        return MoodStatistics()

    scores = [e.score for e in entries]
    average = sum(scores) / len(scores)
    variance = sum((s - average) ** 2 for s in scores) / len(scores)

    return MoodStatistics(
        average=average,
        standard_deviation=math.sqrt(variance),
        min=min(scores),
        max=max(scores)
    )

def calculate_trend(
    entries: Sequence[MoodEntry],
    days: int = DEFAULT_TREND_DAYS,
    now: Optional[datetime] = None
) -> float:
    """
    Calculate the least-squares slope of mood over the trailing window.

    The independent variable is the entry's position in chronological order,
    not elapsed time, so the slope is in score points per entry.

    Args:
        entries: Mood entries to analyze
        days: Window length ending at now
        now: Reference time, defaults to the current time

    Returns:
        Slope, or 0.0 when fewer than two entries fall in the window
    """
    if now is None:
        now = datetime.now()
    window_start = now - timedelta(days=days)

    recent = [e for e in entries if window_start <= e.timestamp <= now]
    if len(recent) < 2:
        return 0.0

    recent.sort(key=lambda e: e.timestamp)
    n = len(recent)
    sum_x = sum_y = sum_xy = sum_x2 = 0.0
    for index, entry in enumerate(recent):
        sum_x += index
        sum_y += entry.score
        sum_xy += index * entry.score
        sum_x2 += index * index

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator

def trend_direction(slope: float) -> TrendDirection:
    """Label a trend slope as up, down or stable."""
    if abs(slope) < STABLE_TREND_THRESHOLD:
        return TrendDirection.STABLE
    return TrendDirection.UP if slope > 0 else TrendDirection.DOWN

def calculate_daily_mood_data(
    entries: Sequence[MoodEntry],
    days: int = DEFAULT_DAILY_SERIES_DAYS,
    now: Optional[datetime] = None
) -> List[DayMoodData]:
    """
    Average mood per calendar day over the trailing window.

    The window covers the last ``days`` days including today. Days without
    entries are left out rather than zero filled.

    Args:
        entries: Mood entries to analyze
        days: Number of days in the window
        now: Reference time, defaults to the current time

    Returns:
        Chronological list with one point per day that has entries
    """
    end_date = to_day(now if now is not None else datetime.now())
    start_date = end_date - timedelta(days=days - 1)

    day_groups: Dict[date, List[MoodEntry]] = defaultdict(list)
    for entry in entries:
        day = to_day(entry.timestamp)
        if start_date <= day <= end_date:
            day_groups[day].append(entry)

    result = []
    for day in sorted(day_groups):
        day_entries = day_groups[day]
        tags = list(dict.fromkeys(tag for e in day_entries for tag in e.tags))
        result.append(DayMoodData(
            date=day,
            average_mood=mean(e.score for e in day_entries),
            entry_count=len(day_entries),
            tags=tags
        ))
    return result

def calculate_cycle_mood_data(
    entries: Sequence[MoodEntry],
    cycle_length: int,
    stop_week_start: int,
    cycle_start_date: Optional[date],
    stop_week_end: Optional[int] = None
) -> List[CycleDayMoodData]:
    """
    Average mood per cycle day across every cycle in the entries.

    All entries are used regardless of age. Every cycle day gets a point,
    with an average of 0.0 when no entry fell on it.

    Args:
        entries: Mood entries to analyze
        cycle_length: Cycle length in days
        stop_week_start: First stop week day
        cycle_start_date: Day 1 of any cycle; None yields an empty series
        stop_week_end: Last stop week day; without it every day from
            stop_week_start to the end of the cycle is stop week, the
            way the mobile app's cycle charts mark it

    Returns:
        List of cycle_length points for days 1..cycle_length
    """
    if cycle_start_date is None:
        return []
    last_stop_day = stop_week_end if stop_week_end is not None else cycle_length

    scores_by_day: Dict[int, List[float]] = defaultdict(list)
    for entry in entries:
        cycle_day = day_in_cycle(cycle_start_date, entry.timestamp, cycle_length)
        scores_by_day[cycle_day].append(entry.score)

    return [
        CycleDayMoodData(
            cycle_day=day,
            average_mood=mean(scores_by_day[day]),
            entry_count=len(scores_by_day[day]),
            is_stop_week=stop_week_start <= day <= last_stop_day
        )
        for day in range(1, cycle_length + 1)
    ]

def calculate_weekday_mood_data(entries: Sequence[MoodEntry]) -> List[WeekdayMoodData]:
    """
    Average mood per day of the week.

    Returns:
        Seven points, Monday first, zero filled
    """
    scores_by_weekday: Dict[int, List[float]] = defaultdict(list)
    for entry in entries:
        scores_by_weekday[entry.timestamp.isoweekday()].append(entry.score)

    return [
        WeekdayMoodData(
            weekday=weekday,
            average_mood=mean(scores_by_weekday[weekday]),
            entry_count=len(scores_by_weekday[weekday])
        )
        for weekday in range(1, 8)
    ]

def time_of_day_for_hour(hour: int) -> TimeOfDay:
    """Map an hour (0-23) onto its time-of-day bin."""
    for name, first_hour, end_hour in TIME_OF_DAY_BINS:
        if first_hour <= hour < end_hour:
            return TimeOfDay(name)
    return TimeOfDay(NIGHT)

def calculate_time_of_day_mood_data(entries: Sequence[MoodEntry]) -> List[TimeOfDayMoodData]:
    """
    Average mood per time of day.

    Bins are morning 5-12h, afternoon 12-17h, evening 17-21h and night for
    the remaining hours.

    Returns:
        Four points in that order, zero filled
    """
    scores_by_time: Dict[TimeOfDay, List[float]] = defaultdict(list)
    for entry in entries:
        scores_by_time[time_of_day_for_hour(entry.timestamp.hour)].append(entry.score)

    return [
        TimeOfDayMoodData(
            time_of_day=time_of_day,
            hour=TIME_OF_DAY_HOURS[time_of_day.value],
            average_mood=mean(scores_by_time[time_of_day]),
            entry_count=len(scores_by_time[time_of_day])
        )
        for time_of_day in TimeOfDay
    ]

def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer with .5 moving away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))

def calculate_mood_distribution(entries: Sequence[MoodEntry]) -> Dict[int, int]:
    """
    Histogram of scores over the integer buckets -5..5.

    Scores are rounded half away from zero, so 2.5 lands in bucket 3 and
    -2.5 in bucket -3.

    Returns:
        All eleven buckets in ascending order, counts summing to len(entries)
    """
    low, high = int(MOOD_MIN_SCORE), int(MOOD_MAX_SCORE)
    distribution = {bucket: 0 for bucket in range(low, high + 1)}
    for entry in entries:
        bucket = int(clamp(round_half_away_from_zero(entry.score), low, high))
        distribution[bucket] += 1
    return distribution

def calculate_tag_correlations(entries: Sequence[MoodEntry]) -> List[TagCorrelation]:
    """
    Calculate the heuristic mood correlation of every tag.

    A tag's correlation is its average mood minus the average over all
    entries, divided by 5 and clamped to -1..1. Small samples are not
    discounted.

    Args:
        entries: Mood entries to analyze

    Returns:
        One correlation per distinct tag, strongest absolute value first

    Example:
        >>> correlations = calculate_tag_correlations(entries)
        >>> [(c.tag, c.correlation) for c in correlations]
        [('Slept well', 0.4), ('Headache', -0.4)]
    """
    if not entries:
        return []

    overall_average = sum(e.score for e in entries) / len(entries)

    # dict preserves first-seen tag order for equally strong tags
    tag_scores: Dict[str, List[float]] = {}
    for entry in entries:
        for tag in entry.tags:
            tag_scores.setdefault(tag, []).append(entry.score)

    correlations = []
    for tag, scores in tag_scores.items():
        average_mood = sum(scores) / len(scores)
        correlations.append(TagCorrelation(
            tag=tag,
            average_mood=average_mood,
            occurrences=len(scores),
            correlation=clamp((average_mood - overall_average) / CORRELATION_NORMALIZER, -1.0, 1.0)
        ))

    return sorted(correlations, key=lambda c: abs(c.correlation), reverse=True)
