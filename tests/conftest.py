"""
Pytest configuration and shared fixtures.
"""
import os

os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "mnemosyne-test")
os.environ.setdefault("MNEMOSYNE_TABLE_NAME", "mnemosyne-test")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")

from dataclasses import dataclass
from datetime import date, datetime
from typing import List

import pytest

from mnemosyne.models.cycle import CycleConfiguration
from mnemosyne.models.entry import MenstrualFlow, MoodEntry
from mnemosyne.services.cycle import CycleModel
from mnemosyne.services.repository import InMemoryMoodEntryRepository

# Monday
NOW = datetime(2024, 3, 18, 12, 0)

@dataclass
class LambdaContext:
    function_name: str = "mnemosyne-test"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:eu-west-1:123456789012:function:mnemosyne-test"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"

@pytest.fixture
def lambda_context() -> LambdaContext:
    """Minimal Lambda context accepted by inject_lambda_context."""
    return LambdaContext()

@pytest.fixture
def now() -> datetime:
    return NOW

@pytest.fixture
def clock():
    """Clock frozen at NOW."""
    return lambda: NOW

@pytest.fixture
def sample_entries() -> List[MoodEntry]:
    """Entries over the week before NOW with tags and flow."""
    return [
        MoodEntry(
            id="e1",
            timestamp=datetime(2024, 3, 12, 8, 30),
            score=3.0,
            tags=["Slept well", "Exercised"]
        ),
        MoodEntry(
            id="e2",
            timestamp=datetime(2024, 3, 13, 22, 15),
            score=-2.0,
            tags=["Headache", "Stress/tension"],
            menstrual_flow=MenstrualFlow.LIGHT
        ),
        MoodEntry(
            id="e3",
            timestamp=datetime(2024, 3, 15, 14, 0),
            score=1.0,
            tags=["Social contact"]
        ),
        MoodEntry(
            id="e4",
            timestamp=datetime(2024, 3, 17, 18, 45),
            score=-1.0,
            tags=["Headache"],
            menstrual_flow=MenstrualFlow.HEAVY
        ),
        MoodEntry(
            id="e5",
            timestamp=datetime(2024, 3, 18, 9, 0),
            score=4.0,
            tags=["Slept well"],
            menstrual_flow=MenstrualFlow.NONE
        ),
    ]

@pytest.fixture
def repository(sample_entries) -> InMemoryMoodEntryRepository:
    return InMemoryMoodEntryRepository(sample_entries)

@pytest.fixture
def configuration() -> CycleConfiguration:
    """28 day cycle starting 2024-03-01 with a day 22-28 stop week."""
    return CycleConfiguration(
        pill_brand="Microgynon",
        cycle_length=28,
        stop_week_start=22,
        stop_week_end=28,
        current_cycle_start_date=date(2024, 3, 1),
        is_configured=True
    )

@pytest.fixture
def cycle_model(repository, clock, configuration) -> CycleModel:
    """Configured cycle model over the sample entries."""
    return CycleModel(repository, clock=clock, configuration=configuration)
