"""
Service module for mood entry history.

This module provides the small history figures shown next to the entry
screen: entries logged for a day, today's count, the logging streak and
the average score of a selection.

Typical usage:
    entries = repository.list_entries()
    streak = calculate_streak(entries)
    today = count_entries_today(entries)
"""
from typing import List, Optional, Sequence
from datetime import date, datetime, timedelta

from mnemosyne.models.entry import MoodEntry
from mnemosyne.services.utils import to_day

def get_entries_for_day(entries: Sequence[MoodEntry], day: date) -> List[MoodEntry]:
    """
    Get entries logged on a calendar day.

    Args:
        entries: Mood entries to search
        day: Calendar day

    Returns:
        Entries for the day, newest first
    """
    return sorted(
        (e for e in entries if to_day(e.timestamp) == day),
        key=lambda e: e.timestamp,
        reverse=True
    )

def count_entries_today(entries: Sequence[MoodEntry], now: Optional[datetime] = None) -> int:
    """Number of entries logged today."""
    today = to_day(now if now is not None else datetime.now())
    return len(get_entries_for_day(entries, today))

def calculate_streak(entries: Sequence[MoodEntry], now: Optional[datetime] = None) -> int:
    """
    Count consecutive days with at least one entry, ending today.

    Args:
        entries: Mood entries to analyze
        now: Reference time, defaults to the current time

    Returns:
        Streak length in days; 0 when nothing was logged today

    Example:
        >>> calculate_streak(entries)  # entries today, yesterday, 3 days ago
        2
    """
    logged_days = {to_day(e.timestamp) for e in entries}
    current = to_day(now if now is not None else datetime.now())

    streak = 0
    while current in logged_days:
        streak += 1
        current -= timedelta(days=1)
    return streak

def calculate_average_score(entries: Sequence[MoodEntry]) -> Optional[float]:
    """Average score, None for no entries."""
    if not entries:
        return None
    return sum(e.score for e in entries) / len(entries)
