"""
Lambda handler for mood insights.

Serves the statistics, tag, timing and cycle insight sections computed by
the correlation engine over the stored mood entries.
"""
from typing import Any, Dict, List, Optional
from datetime import datetime
import json

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from mnemosyne.models.cycle import CycleConfiguration
from mnemosyne.models.entry import MoodEntry
from mnemosyne.models.insights import TimeRange
from mnemosyne.services.constants import TIME_RANGE_DAYS
from mnemosyne.services.correlation import (
    calculate_cycle_mood_data,
    calculate_daily_mood_data,
    calculate_mood_distribution,
    calculate_statistics,
    calculate_tag_correlations,
    calculate_time_of_day_mood_data,
    calculate_trend,
    calculate_weekday_mood_data,
    trend_direction
)
from mnemosyne.services.history import calculate_streak, count_entries_today
from mnemosyne.services.insights import (
    compare_cycle_phases,
    detect_pms_pattern,
    filter_entries_by_range,
    find_weekday_extremes,
    rank_tags_by_frequency,
    summarize_tags
)
from mnemosyne.services.repository import DynamoMoodEntryRepository
from mnemosyne.utils.logging import logger

tracer = Tracer()

SECTIONS = ("overview", "tags", "timing", "cycle")

# Daily chart length when every entry is selected
ALL_RANGE_DAILY_DAYS = 365

# Initialize shared repository (lazy loading)
_repository = None

def get_repository() -> DynamoMoodEntryRepository:
    """Get or create the entry repository."""
    global _repository
    if _repository is None:
        _repository = DynamoMoodEntryRepository()
    return _repository

def _dump(models) -> List[Dict[str, Any]]:
    return [m.model_dump(mode="json") for m in models]

def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body)
    }

def build_overview(
    entries: List[MoodEntry],
    all_entries: List[MoodEntry],
    time_range: TimeRange,
    now: datetime
) -> Dict[str, Any]:
    """
    Build the overview section.

    Args:
        entries: Entries within the selected range
        all_entries: Every stored entry, for streak and today's count
        time_range: Selected range
        now: Reference time

    Returns:
        Statistics, trend, daily series, distribution and top tags
    """
    slope = calculate_trend(entries, now=now)
    days = TIME_RANGE_DAYS[time_range.value] or ALL_RANGE_DAILY_DAYS
    distribution = calculate_mood_distribution(entries)

    return {
        "entry_count": len(entries),
        "today_count": count_entries_today(all_entries, now=now),
        "streak": calculate_streak(all_entries, now=now),
        "statistics": calculate_statistics(entries).model_dump(mode="json"),
        "trend": {"slope": slope, "direction": trend_direction(slope).value},
        "daily": _dump(calculate_daily_mood_data(entries, days=days, now=now)),
        "distribution": {str(bucket): count for bucket, count in distribution.items()},
        "top_tags": summarize_tags(calculate_tag_correlations(entries)).model_dump(mode="json")
    }

def build_tags(entries: List[MoodEntry]) -> Dict[str, Any]:
    """Build the tags section."""
    correlations = calculate_tag_correlations(entries)
    return {
        "correlations": _dump(correlations),
        "frequency": _dump(rank_tags_by_frequency(correlations))
    }

def build_timing(entries: List[MoodEntry]) -> Dict[str, Any]:
    """Build the timing section."""
    weekday_data = calculate_weekday_mood_data(entries)
    extremes = find_weekday_extremes(weekday_data)
    return {
        "weekdays": _dump(weekday_data),
        "time_of_day": _dump(calculate_time_of_day_mood_data(entries)),
        "extremes": extremes.model_dump(mode="json") if extremes else None
    }

def build_cycle(entries: List[MoodEntry], configuration: Optional[CycleConfiguration]) -> Dict[str, Any]:
    """
    Build the cycle section.

    Returns:
        ``{"configured": False}`` when no cycle configuration exists
    """
    if configuration is None or not configuration.is_configured:
        return {"configured": False}

    cycle_data = calculate_cycle_mood_data(
        entries,
        cycle_length=configuration.cycle_length,
        stop_week_start=configuration.stop_week_start,
        cycle_start_date=configuration.current_cycle_start_date,
        stop_week_end=configuration.stop_week_end
    )
    return {
        "configured": True,
        "cycle_days": _dump(cycle_data),
        "phase_comparison": compare_cycle_phases(cycle_data).model_dump(mode="json"),
        "pms_pattern": detect_pms_pattern(cycle_data, configuration.stop_week_start).model_dump(mode="json")
    }

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Handle an insights request.

    Query parameters:
        range: week, month, quarter or all (default month)
        section: overview, tags, timing or cycle (default overview)

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    query_params = event.get("queryStringParameters") or {}
    range_name = query_params.get("range", TimeRange.MONTH.value)
    section = query_params.get("section", "overview")

    try:
        time_range = TimeRange(range_name)
    except ValueError:
        return _response(400, {"error": f"Unknown range: {range_name}"})
    if section not in SECTIONS:
        return _response(400, {"error": f"Unknown section: {section}"})

    try:
        repository = get_repository()
        now = datetime.now()
        all_entries = repository.list_entries()
        entries = filter_entries_by_range(all_entries, time_range, now=now)

        logger.info("Calculating insights", extra={
            "section": section,
            "range": time_range.value,
            "entry_count": len(entries)
        })

        if section == "overview":
            payload = build_overview(entries, all_entries, time_range, now)
        elif section == "tags":
            payload = build_tags(entries)
        elif section == "timing":
            payload = build_timing(entries)
        else:
            payload = build_cycle(entries, repository.load_configuration())

        return _response(200, {"section": section, "range": time_range.value, **payload})

    except Exception as e:
        logger.exception("Error calculating insights", extra={
            "error": str(e),
            "error_type": e.__class__.__name__,
            "section": section
        })
        return _response(500, {"error": "Internal error"})
