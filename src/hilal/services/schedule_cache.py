"""Cache of the schedule for the current local date."""

import logging
from datetime import date
from zoneinfo import ZoneInfo

from hilal.domain.events import ScheduleComputedEvent
from hilal.domain.models import PrayerSchedule
from hilal.services.ports import EventBusPort
from hilal.services.prayer_service import PrayerService

logger = logging.getLogger(__name__)


class DailyScheduleCache:
    """Holds exactly one schedule, recomputed on date or settings change.

    The cached schedule is frozen and replaced by reference, so readers on
    other threads always see a complete snapshot.
    """

    def __init__(
        self,
        prayer_service: PrayerService,
        event_bus: EventBusPort | None = None,
    ) -> None:
        self._prayer_service = prayer_service
        self._event_bus = event_bus
        self._schedule: PrayerSchedule | None = None
        self._key: tuple | None = None
        self._recompute_count = 0

    @property
    def current(self) -> PrayerSchedule | None:
        """Last published schedule, if any."""
        return self._schedule

    @property
    def timezone(self) -> ZoneInfo:
        """Timezone whose calendar date keys the cache."""
        return self._prayer_service.timezone

    @property
    def recompute_count(self) -> int:
        """How many times the schedule has been computed."""
        return self._recompute_count

    def get(self, today: date) -> PrayerSchedule:
        """Schedule of ``today``, recomputing only when stale."""
        key = self._prayer_service.settings.calculation_key
        schedule = self._schedule
        if schedule is not None and schedule.date == today and key == self._key:
            return schedule

        reason = "first run" if schedule is None else (
            "date change" if schedule.date != today else "settings change"
        )
        schedule = self._prayer_service.calculate(today)
        self._schedule = schedule
        self._key = key
        self._recompute_count += 1
        logger.info(f"Schedule recomputed for {today} ({reason})")

        if self._event_bus:
            self._event_bus.publish(ScheduleComputedEvent(schedule=schedule))
        return schedule

    def invalidate(self) -> None:
        """Force recomputation on the next access."""
        self._schedule = None
        self._key = None
