"""
Cycle model definitions for pill cycle configuration and status.
"""
from enum import Enum
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from mnemosyne.services.constants import MIN_CYCLE_LENGTH

class CyclePhase(str, Enum):
    """
    Phase of a pill cycle day.
    """
    ACTIVE = "active"
    PMS = "pms"
    STOP_WEEK = "stop_week"

class CycleConfiguration(BaseModel):
    """
    Represents the user's single active pill cycle configuration.

    Day numbers are 1-indexed positions within the cycle. The stop week
    must lie inside the cycle and span at least two days.
    """
    pill_brand: str = ""
    cycle_length: int = Field(..., ge=MIN_CYCLE_LENGTH)
    stop_week_start: int = Field(..., ge=1)
    stop_week_end: int
    current_cycle_start_date: date
    is_configured: bool = False
    last_modified: Optional[datetime] = None

    @model_validator(mode="after")
    def check_stop_week_bounds(self) -> "CycleConfiguration":
        """Ensure 1 <= stop_week_start < stop_week_end <= cycle_length."""
        if not self.stop_week_start < self.stop_week_end <= self.cycle_length:
            raise ValueError(
                f"Stop week {self.stop_week_start}-{self.stop_week_end} does not fit "
                f"in a {self.cycle_length} day cycle"
            )
        return self

    @property
    def stop_week_length(self) -> int:
        """Number of days in the stop week, inclusive."""
        return self.stop_week_end - self.stop_week_start + 1

class CycleStatus(BaseModel):
    """
    Point-in-time cycle status.

    When no configuration exists every optional field is None; callers
    branch on ``configured`` rather than receiving a guessed day 1.
    """
    configured: bool
    cycle_day: Optional[int] = None
    phase: Optional[CyclePhase] = None
    days_until_next_stop_week: Optional[int] = None

    @classmethod
    def unconfigured(cls) -> "CycleStatus":
        return cls(configured=False)

    @property
    def is_stop_week(self) -> bool:
        return self.phase == CyclePhase.STOP_WEEK

    @property
    def is_pms(self) -> bool:
        return self.phase == CyclePhase.PMS

class DateInterval(BaseModel):
    """
    Inclusive calendar date range.
    """
    start: date
    end: date

    @property
    def duration(self) -> int:
        """Number of days covered, inclusive of both ends."""
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end
