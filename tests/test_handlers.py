"""
Tests for the insights and cycle Lambda handlers.
"""
import json
import pytest
from unittest.mock import Mock, patch

from mnemosyne.handlers import cycle, insights
from mnemosyne.services.repository import InMemoryMoodEntryRepository
from mnemosyne.utils.logging import format_exception

@pytest.fixture
def mock_repository(sample_entries, configuration):
    """Repository mock serving the sample entries and configuration."""
    repository = Mock()
    repository.list_entries.side_effect = InMemoryMoodEntryRepository(sample_entries).list_entries
    repository.load_configuration.return_value = configuration
    return repository

@pytest.fixture
def insights_repository(mock_repository):
    with patch("mnemosyne.handlers.insights.get_repository", return_value=mock_repository):
        yield mock_repository

@pytest.fixture
def cycle_repository(mock_repository):
    with patch("mnemosyne.handlers.cycle.get_repository", return_value=mock_repository):
        yield mock_repository

def insights_event(**params):
    return {"httpMethod": "GET", "path": "/insights", "queryStringParameters": params or None}

def cycle_event(method, path, params=None, body=None):
    return {
        "httpMethod": method,
        "path": path,
        "queryStringParameters": params,
        "body": json.dumps(body) if body is not None else None
    }

def test_insights_overview(insights_repository, lambda_context):
    """Overview of every entry."""
    response = insights.handler(insights_event(range="all"), lambda_context)

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body["section"] == "overview"
    assert body["range"] == "all"
    assert body["entry_count"] == 5
    assert body["statistics"]["average"] == pytest.approx(1.0)
    assert body["statistics"]["min"] == -2.0
    assert set(body["distribution"]) == {str(b) for b in range(-5, 6)}
    assert sum(body["distribution"].values()) == 5
    assert body["trend"]["direction"] in ("up", "down", "stable")
    assert [t["tag"] for t in body["top_tags"]["positive"]][0] == "Slept well"

def test_insights_tags(insights_repository, lambda_context):
    response = insights.handler(insights_event(range="all", section="tags"), lambda_context)

    body = json.loads(response["body"])
    assert response["statusCode"] == 200
    assert len(body["correlations"]) == 5
    assert body["correlations"][0]["tag"] == "Stress/tension"
    assert body["correlations"][0]["strength"] == "strong_negative"
    assert body["frequency"][0]["occurrences"] == 2

def test_insights_timing(insights_repository, lambda_context):
    response = insights.handler(insights_event(range="all", section="timing"), lambda_context)

    body = json.loads(response["body"])
    assert [d["weekday_name"] for d in body["weekdays"]][0] == "Monday"
    assert [b["time_of_day"] for b in body["time_of_day"]] == ["morning", "afternoon", "evening", "night"]
    assert body["extremes"]["best"]["weekday_name"] == "Monday"

def test_insights_cycle(insights_repository, lambda_context):
    response = insights.handler(insights_event(range="all", section="cycle"), lambda_context)

    body = json.loads(response["body"])
    assert body["configured"] is True
    assert len(body["cycle_days"]) == 28
    assert body["phase_comparison"]["pill_week_entries"] == 5
    assert body["pms_pattern"]["detected"] is False

def test_insights_cycle_unconfigured(insights_repository, lambda_context):
    insights_repository.load_configuration.return_value = None

    response = insights.handler(insights_event(section="cycle"), lambda_context)

    assert json.loads(response["body"]) == {"section": "cycle", "range": "month", "configured": False}

def test_insights_empty(insights_repository, lambda_context):
    """No entries still produce a complete overview."""
    insights_repository.list_entries.side_effect = None
    insights_repository.list_entries.return_value = []

    response = insights.handler(insights_event(), lambda_context)

    body = json.loads(response["body"])
    assert response["statusCode"] == 200
    assert body["entry_count"] == 0
    assert body["statistics"] == {"average": 0.0, "standard_deviation": 0.0, "min": 0.0, "max": 0.0}
    assert body["daily"] == []
    assert body["streak"] == 0

@pytest.mark.parametrize("params", [{"range": "decade"}, {"section": "calendar"}])
def test_insights_bad_request(insights_repository, lambda_context, params):
    response = insights.handler(insights_event(**params), lambda_context)
    assert response["statusCode"] == 400

def test_insights_repository_failure(insights_repository, lambda_context):
    insights_repository.list_entries.side_effect = RuntimeError("table unavailable")

    response = insights.handler(insights_event(), lambda_context)

    assert response["statusCode"] == 500

def test_cycle_status(cycle_repository, lambda_context):
    response = cycle.handler(cycle_event("GET", "/cycle/status"), lambda_context)

    body = json.loads(response["body"])
    assert response["statusCode"] == 200
    assert body["configured"] is True
    assert 1 <= body["cycle_day"] <= 28
    assert body["phase"] in ("active", "pms", "stop_week")

def test_cycle_status_unconfigured(cycle_repository, lambda_context):
    cycle_repository.load_configuration.return_value = None

    response = cycle.handler(cycle_event("GET", "/cycle/status"), lambda_context)

    assert json.loads(response["body"]) == {
        "configured": False,
        "cycle_day": None,
        "phase": None,
        "days_until_next_stop_week": None
    }

def test_cycle_predictions(cycle_repository, lambda_context):
    response = cycle.handler(
        cycle_event("GET", "/cycle/predictions", params={"count": "2"}),
        lambda_context
    )

    body = json.loads(response["body"])
    assert len(body["stop_weeks"]) == 2
    first, second = body["stop_weeks"]
    assert first["start"] < second["start"]
    assert "average_flow_intensity" in first

def test_cycle_flow(cycle_repository, lambda_context):
    response = cycle.handler(
        cycle_event("GET", "/cycle/flow", params={"month": "2024-03"}),
        lambda_context
    )

    body = json.loads(response["body"])
    assert body["month"] == "2024-03"
    assert body["flow"] == {
        "2024-03-13": "light",
        "2024-03-17": "heavy",
        "2024-03-18": "none"
    }

def test_cycle_configuration(cycle_repository, lambda_context):
    """A valid configuration is applied and stored."""
    response = cycle.handler(cycle_event("PUT", "/cycle/configuration", body={
        "pill_brand": "Yaz",
        "cycle_length": 28,
        "stop_week_start": 22,
        "stop_week_end": 28,
        "cycle_start_date": "2024-01-01"
    }), lambda_context)

    assert response["statusCode"] == 200
    saved = cycle_repository.save_configuration.call_args[0][0]
    assert saved.pill_brand == "Yaz"
    assert saved.is_configured is True

@pytest.mark.parametrize("body", [
    {"cycle_length": 28, "stop_week_start": 22, "stop_week_end": 22, "cycle_start_date": "2024-01-01"},
    {"cycle_length": 28, "stop_week_start": 22, "stop_week_end": 28, "cycle_start_date": "2999-01-01"},
    {"cycle_length": 28, "stop_week_start": 22},
    {"cycle_length": "many", "stop_week_start": 22, "stop_week_end": 28, "cycle_start_date": "2024-01-01"},
])
def test_cycle_configuration_rejected(cycle_repository, lambda_context, body):
    response = cycle.handler(cycle_event("PUT", "/cycle/configuration", body=body), lambda_context)

    assert response["statusCode"] == 400
    cycle_repository.save_configuration.assert_not_called()

def test_cycle_shift(cycle_repository, lambda_context, configuration):
    response = cycle.handler(
        cycle_event("POST", "/cycle/shift", body={"days": 2}),
        lambda_context
    )

    assert response["statusCode"] == 200
    saved = cycle_repository.save_configuration.call_args[0][0]
    assert (saved.current_cycle_start_date - configuration.current_cycle_start_date).days == 2

def test_cycle_shift_unconfigured(cycle_repository, lambda_context):
    cycle_repository.load_configuration.return_value = None

    response = cycle.handler(cycle_event("POST", "/cycle/shift", body={"days": 2}), lambda_context)

    assert json.loads(response["body"])["configured"] is False
    cycle_repository.save_configuration.assert_not_called()

def test_cycle_unknown_route(cycle_repository, lambda_context):
    response = cycle.handler(cycle_event("DELETE", "/cycle/status"), lambda_context)
    assert response["statusCode"] == 404

def test_cycle_shift_current_cycle_only(cycle_repository, lambda_context, configuration):
    """shift_all_future false keeps the schedule."""
    response = cycle.handler(
        cycle_event("POST", "/cycle/shift", body={"days": 2, "shift_all_future": False}),
        lambda_context
    )

    assert response["statusCode"] == 200
    saved = cycle_repository.save_configuration.call_args[0][0]
    assert saved.current_cycle_start_date == configuration.current_cycle_start_date

@pytest.mark.parametrize("flag", ["false", 0, None])
def test_cycle_shift_rejects_non_boolean_flag(cycle_repository, lambda_context, flag):
    response = cycle.handler(
        cycle_event("POST", "/cycle/shift", body={"days": 2, "shift_all_future": flag}),
        lambda_context
    )

    assert response["statusCode"] == 400
    cycle_repository.save_configuration.assert_not_called()

def test_format_exception_single_line():
    try:
        raise RuntimeError("table unavailable")
    except RuntimeError:
        formatted = format_exception()

    assert "\n" not in formatted
    assert "RuntimeError: table unavailable" in formatted
