"""
Mood entry model definition for logged mood scores, tags and flow data.
"""
import uuid
from enum import Enum
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from mnemosyne.services.constants import (
    MOOD_MIN_SCORE,
    MOOD_MAX_SCORE,
    NEGATIVE_TAGS,
    POSITIVE_TAGS,
    MOOD_LABELS
)

class MenstrualFlow(str, Enum):
    """
    Menstrual flow intensity recorded alongside a mood entry.
    """
    NONE = "none"
    SPOTTING = "spotting"
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"

class MoodEntry(BaseModel):
    """
    Represents a single mood log with score, context tags and optional flow.

    Entries are owned by the storage layer; analytics only ever read them.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime
    score: float = Field(..., ge=MOOD_MIN_SCORE, le=MOOD_MAX_SCORE)
    tags: List[str] = Field(default_factory=list)
    note: Optional[str] = None
    menstrual_flow: Optional[MenstrualFlow] = None

    @field_validator("timestamp")
    @classmethod
    def to_local_time(cls, timestamp: datetime) -> datetime:
        """Store timestamps as naive local time; aware values are converted."""
        if timestamp.tzinfo is not None:
            return timestamp.astimezone().replace(tzinfo=None)
        return timestamp

    @field_validator("tags")
    @classmethod
    def drop_duplicate_tags(cls, tags: List[str]) -> List[str]:
        """Keep the first occurrence of each tag, preserving order."""
        return list(dict.fromkeys(tags))

    @property
    def mood_label(self) -> str:
        """Human readable label for the score band."""
        for lower, upper, label in MOOD_LABELS:
            if lower <= self.score < upper:
                return label
        # Only the top of the range falls through
        return MOOD_LABELS[-1][2]

    @property
    def positive_tags(self) -> List[str]:
        return [tag for tag in self.tags if tag in POSITIVE_TAGS]

    @property
    def negative_tags(self) -> List[str]:
        return [tag for tag in self.tags if tag in NEGATIVE_TAGS]

    @property
    def has_positive_tags(self) -> bool:
        return bool(self.positive_tags)

    @property
    def has_negative_tags(self) -> bool:
        return bool(self.negative_tags)

    @property
    def has_flow(self) -> bool:
        """Check if a flow label was recorded for this entry."""
        return self.menstrual_flow is not None
