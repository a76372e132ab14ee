"""
Service module for pill cycle calculations and predictions.

This module holds the active cycle configuration and answers point-in-time
questions about it: the current cycle day and phase, upcoming stop weeks,
forgotten pill corrections and recorded flow.

Typical usage:
    model = CycleModel(repository=repository)
    model.configure("Microgynon", 28, 22, 28, date(2024, 1, 1))
    status = model.current_status()
    upcoming = model.predict_stop_weeks(count=3)
"""
import threading
from typing import Callable, Dict, List, Optional
from datetime import date, datetime, timedelta

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from mnemosyne.models.cycle import CycleConfiguration, CyclePhase, CycleStatus, DateInterval
from mnemosyne.models.entry import MenstrualFlow
from mnemosyne.services.constants import DEFAULT_PREDICTION_COUNT, FLOW_INTENSITY
from mnemosyne.services.exceptions import InvalidConfigurationError
from mnemosyne.services.repository import MoodEntryRepository
from mnemosyne.services.utils import (
    DateLike,
    classify_cycle_day,
    day_in_cycle,
    days_between,
    days_until_stop_week,
    month_bounds,
    to_day
)

logger = Logger()

StatusListener = Callable[[CycleStatus], None]

class CycleModel:
    """
    Cycle configuration holder and cycle arithmetic service.

    Configuration changes are serialized with a lock so status reads never
    observe a half-applied change. Wall-clock time comes from the injected
    clock, which keeps every answer reproducible in tests.
    """

    def __init__(
        self,
        repository: MoodEntryRepository,
        clock: Callable[[], datetime] = datetime.now,
        configuration: Optional[CycleConfiguration] = None,
        on_status_change: Optional[StatusListener] = None
    ):
        self._repository = repository
        self._clock = clock
        self._on_status_change = on_status_change
        self._lock = threading.RLock()
        self._configuration = configuration if configuration and configuration.is_configured else None

    # Configuration

    @property
    def configuration(self) -> Optional[CycleConfiguration]:
        """Copy of the active configuration, None until configured."""
        with self._lock:
            if self._configuration is None:
                return None
            return self._configuration.model_copy()

    @property
    def is_configured(self) -> bool:
        with self._lock:
            return self._configuration is not None

    def today(self) -> date:
        return to_day(self._clock())

    def configure(
        self,
        pill_brand: str,
        cycle_length: int,
        stop_week_start: int,
        stop_week_end: int,
        cycle_start_date: date
    ) -> CycleStatus:
        """
        Create or replace the cycle configuration.

        Args:
            pill_brand: Free text pill name
            cycle_length: Cycle length in days
            stop_week_start: First stop week day (1-based)
            stop_week_end: Last stop week day (1-based)
            cycle_start_date: Day 1 of the cycle in progress

        Returns:
            Cycle status for today under the new configuration

        Raises:
            InvalidConfigurationError: If the day ordering is violated or the
                start date lies in the future. The previous configuration is kept.

        Example:
            >>> status = model.configure("Yaz", 28, 22, 28, date(2024, 1, 1))
            >>> status.configured
            True
        """
        now = self._clock()
        if to_day(cycle_start_date) > to_day(now):
            raise InvalidConfigurationError(
                f"Cycle start date {cycle_start_date} is in the future"
            )
        try:
            configuration = CycleConfiguration(
                pill_brand=pill_brand,
                cycle_length=cycle_length,
                stop_week_start=stop_week_start,
                stop_week_end=stop_week_end,
                current_cycle_start_date=to_day(cycle_start_date),
                is_configured=True,
                last_modified=now
            )
        except ValidationError as e:
            raise InvalidConfigurationError(str(e)) from e

        with self._lock:
            self._configuration = configuration
            status = self._status_for(to_day(now))

        logger.info("Cycle configured", extra={
            "cycle_length": cycle_length,
            "stop_week_start": stop_week_start,
            "stop_week_end": stop_week_end,
            "cycle_start_date": str(cycle_start_date)
        })
        self._notify(status)
        return status

    # Status

    def current_status(self) -> CycleStatus:
        """Cycle status for today."""
        return self.status_on(self.today())

    def status_on(self, day: DateLike) -> CycleStatus:
        """
        Cycle status for any date.

        Returns:
            Status with cycle day, phase and days until the next stop week,
            or the unconfigured status if no configuration exists
        """
        with self._lock:
            return self._status_for(to_day(day))

    def day_in_cycle(self, day: DateLike) -> Optional[int]:
        """Cycle day for a date, None when unconfigured."""
        with self._lock:
            config = self._configuration
            if config is None:
                return None
            return day_in_cycle(config.current_cycle_start_date, day, config.cycle_length)

    def is_stop_week_day(self, day: DateLike) -> bool:
        return self.status_on(day).phase == CyclePhase.STOP_WEEK

    def is_pms_day(self, day: DateLike) -> bool:
        return self.status_on(day).phase == CyclePhase.PMS

    def _status_for(self, day: date) -> CycleStatus:
        config = self._configuration
        if config is None:
            return CycleStatus.unconfigured()

        cycle_day = day_in_cycle(config.current_cycle_start_date, day, config.cycle_length)
        return CycleStatus(
            configured=True,
            cycle_day=cycle_day,
            phase=classify_cycle_day(cycle_day, config.stop_week_start, config.stop_week_end),
            days_until_next_stop_week=days_until_stop_week(
                cycle_day, config.stop_week_start, config.cycle_length
            )
        )

    # Predictions

    def predict_stop_weeks(
        self,
        count: int = DEFAULT_PREDICTION_COUNT,
        from_date: Optional[DateLike] = None
    ) -> List[DateInterval]:
        """
        Predict upcoming stop weeks.

        The first interval is the earliest stop week that has not ended
        before from_date, so a stop week in progress is included.

        Args:
            count: Number of intervals to return
            from_date: Reference date, defaults to today

        Returns:
            Exactly count chronological intervals, or an empty list when
            unconfigured or count is not positive
        """
        reference = to_day(from_date) if from_date is not None else self.today()
        config = self.configuration
        if config is None or count <= 0:
            return []

        length = config.cycle_length
        cycle_start = config.current_cycle_start_date
        completed_cycles = days_between(cycle_start, reference) // length

        predictions = []
        cycle_number = completed_cycles
        while len(predictions) < count:
            start_of_cycle = cycle_start + timedelta(days=cycle_number * length)
            period_start = start_of_cycle + timedelta(days=config.stop_week_start - 1)
            period_end = period_start + timedelta(days=config.stop_week_length - 1)
            if period_end >= reference:
                predictions.append(DateInterval(start=period_start, end=period_end))
            cycle_number += 1

        return predictions

    # Pill forgotten

    def shift_cycle_start(self, delta_days: int, shift_all_future: bool = True) -> CycleStatus:
        """
        Move the cycle start after a missed or late pill.

        Shifting the start date slides every future cycle. Adjusting only
        the current cycle is not supported; with shift_all_future=False the
        schedule is left unchanged.

        Args:
            delta_days: Days to move the start date, may be negative
            shift_all_future: Whether to shift all future cycles

        Returns:
            Cycle status for today after the shift
        """
        now = self._clock()
        with self._lock:
            config = self._configuration
            if config is None:
                return CycleStatus.unconfigured()

            updates = {"last_modified": now}
            if shift_all_future:
                updates["current_cycle_start_date"] = (
                    config.current_cycle_start_date + timedelta(days=delta_days)
                )
            config = config.model_copy(update=updates)
            self._configuration = config
            status = self._status_for(to_day(now))

        logger.info("Cycle start shifted", extra={
            "delta_days": delta_days,
            "shift_all_future": shift_all_future,
            "cycle_start_date": str(config.current_cycle_start_date)
        })
        self._notify(status)
        return status

    # Flow

    def flow_history(self, month: DateLike) -> Dict[date, MenstrualFlow]:
        """
        Recorded flow per day for the month containing a date.

        When several entries on one day carry a flow label, the entry with
        the latest timestamp wins.

        Args:
            month: Any date within the month

        Returns:
            Mapping of calendar day to flow label
        """
        first, last = month_bounds(month)
        entries = self._repository.list_entries(
            lambda e: e.has_flow and first <= to_day(e.timestamp) <= last
        )

        history = {}
        for entry in sorted(entries, key=lambda e: (e.timestamp, e.id)):
            history[to_day(entry.timestamp)] = entry.menstrual_flow
        return history

    def average_flow_intensity(self, interval: DateInterval) -> Optional[float]:
        """
        Average flow intensity over an inclusive date interval.

        Flow labels map to spotting=1, light=2, medium=3, heavy=4. Entries
        labelled "none" do not count.

        Returns:
            Mean intensity, or None if no entry carries an intensity
        """
        entries = self._repository.list_entries(
            lambda e: e.has_flow and interval.contains(to_day(e.timestamp))
        )
        intensities = [
            FLOW_INTENSITY[e.menstrual_flow.value]
            for e in entries
            if e.menstrual_flow.value in FLOW_INTENSITY
        ]
        if not intensities:
            return None
        return sum(intensities) / len(intensities)

    def _notify(self, status: CycleStatus) -> None:
        if self._on_status_change is not None:
            self._on_status_change(status)
