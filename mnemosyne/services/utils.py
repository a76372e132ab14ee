"""
Shared utility functions for cycle and mood analytics.

These utilities are used across the cycle model and the correlation engine
to handle day normalization, cycle day arithmetic and phase mapping.
"""
import calendar
from typing import Tuple, Union
from datetime import date, datetime

from mnemosyne.models.cycle import CyclePhase
from mnemosyne.services.constants import PMS_WINDOW_DAYS

DateLike = Union[date, datetime]

def to_day(value: DateLike) -> date:
    """
    Normalize a date or datetime to its calendar day.

    Args:
        value: Date or datetime to normalize

    Returns:
        Calendar date without time component
    """
    if isinstance(value, datetime):
        return value.date()
    return value

def days_between(start: DateLike, end: DateLike) -> int:
    """
    Count whole calendar days from start to end.

    Both values are normalized to their day first, so 23:59 and 00:01 on
    consecutive days are one day apart. Negative when end precedes start.
    """
    return (to_day(end) - to_day(start)).days

def day_in_cycle(cycle_start: DateLike, target: DateLike, cycle_length: int) -> int:
    """
    Calculate the 1-based position of a date within a repeating cycle.

    Python's modulo is already non-negative for a positive divisor, so dates
    before the cycle start map onto the previous cycle.

    Args:
        cycle_start: Day 1 of any cycle
        target: Date to calculate for
        cycle_length: Cycle length in days

    Returns:
        Cycle day in the range 1..cycle_length

    Example:
        >>> day_in_cycle(date(2024, 1, 1), date(2023, 12, 25), 28)
        22
    """
    return days_between(cycle_start, target) % cycle_length + 1

def classify_cycle_day(cycle_day: int, stop_week_start: int, stop_week_end: int) -> CyclePhase:
    """
    Map a cycle day to its phase.

    The PMS window starts PMS_WINDOW_DAYS before the stop week. When the stop
    week starts within the first week the window start is left non-positive
    and is not wrapped into the previous cycle.

    Args:
        cycle_day: Day in the cycle (1-based)
        stop_week_start: First stop week day
        stop_week_end: Last stop week day

    Returns:
        Phase for the day
    """
    if stop_week_start <= cycle_day <= stop_week_end:
        return CyclePhase.STOP_WEEK
    if stop_week_start - PMS_WINDOW_DAYS <= cycle_day < stop_week_start:
        return CyclePhase.PMS
    return CyclePhase.ACTIVE

def days_until_stop_week(cycle_day: int, stop_week_start: int, cycle_length: int) -> int:
    """
    Days from the given cycle day until the next stop week begins.

    During the stop week this counts towards the following cycle's stop week.
    """
    if cycle_day < stop_week_start:
        return stop_week_start - cycle_day
    return (cycle_length - cycle_day) + stop_week_start

def month_bounds(value: DateLike) -> Tuple[date, date]:
    """
    Get the first and last day of the month containing a date.

    Example:
        >>> month_bounds(date(2024, 2, 10))
        (datetime.date(2024, 2, 1), datetime.date(2024, 2, 29))
    """
    day = to_day(value)
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)

def clamp(value: float, low: float, high: float) -> float:
    """Limit value to the closed range [low, high]."""
    return max(low, min(high, value))

def mean(values) -> float:
    """Arithmetic mean, 0.0 for no values."""
    values = list(values)
    return sum(values) / len(values) if values else 0.0
