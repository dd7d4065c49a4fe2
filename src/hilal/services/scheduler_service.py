"""Tick scheduler firing each prayer exactly once."""

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta

from hilal.domain.events import PrayerTimeReachedEvent
from hilal.domain.models import ADHAN_PRAYERS, PrayerName, PrayerSchedule, PrayerTime
from hilal.services.ports import DispatcherPort, EventBusPort, TickerPort
from hilal.services.schedule_cache import DailyScheduleCache

logger = logging.getLogger(__name__)

TICK_INTERVAL_SECONDS = 1.0
COLD_START_TOLERANCE = timedelta(seconds=2)
FIRED_REGISTRY_LIMIT = 120


class FiredRegistry:
    """(date, prayer) keys already dispatched in this process.

    Cleared wholesale past the limit; stale keys only suppress past events.
    """

    def __init__(self, limit: int = FIRED_REGISTRY_LIMIT) -> None:
        self._limit = limit
        self._keys: set[tuple[date, PrayerName]] = set()

    def __contains__(self, key: tuple[date, PrayerName]) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def add(self, key: tuple[date, PrayerName]) -> None:
        self._keys.add(key)
        if len(self._keys) > self._limit:
            logger.debug(f"Fired registry exceeded {self._limit} entries, clearing")
            self._keys.clear()
            self._keys.add(key)


class SchedulerService:
    """Compares wall-clock time with the daily schedule once per second.

    A prayer fires when its instant lies in ``(previous tick, this tick]``,
    so late or skipped ticks still fire it once. Without a previous tick
    (first tick after start or restart) it fires only within two seconds of
    the instant.
    """

    def __init__(
        self,
        schedule_cache: DailyScheduleCache,
        dispatcher: DispatcherPort,
        ticker: TickerPort | None = None,
        event_bus: EventBusPort | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize scheduler service.

        Args:
            schedule_cache: Daily schedule source
            dispatcher: Notification and audio boundary
            ticker: Periodic timer (optional, ``tick`` can be driven manually)
            event_bus: Event bus (optional)
            clock: Returns the current aware datetime (default: settings timezone)
        """
        self._cache = schedule_cache
        self._dispatcher = dispatcher
        self._ticker = ticker
        self._event_bus = event_bus
        self._clock = clock
        self._previous_observed_instant: datetime | None = None
        self._fired = FiredRegistry()
        self._stopped = False
        self._started_at: datetime | None = None

    @property
    def previous_observed_instant(self) -> datetime | None:
        """Instant observed by the last tick."""
        return self._previous_observed_instant

    @property
    def fired_count(self) -> int:
        """Number of keys currently in the fired registry."""
        return len(self._fired)

    @property
    def running(self) -> bool:
        """Is the ticker active?"""
        return self._ticker is not None and self._ticker.running and not self._stopped

    @property
    def started_at(self) -> datetime | None:
        return self._started_at

    def has_fired(self, day: date, prayer: PrayerName) -> bool:
        return (day, prayer) in self._fired

    def _now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self._cache.timezone)

    def get_schedule(self, now: datetime | None = None) -> PrayerSchedule:
        """Schedule of the current local date."""
        now = now or self._now()
        return self._cache.get(now.astimezone(self._cache.timezone).date())

    def _should_fire(self, instant: datetime, now: datetime) -> bool:
        previous = self._previous_observed_instant
        if previous is not None:
            return previous < instant <= now
        return abs(now - instant) <= COLD_START_TOLERANCE

    def tick(self, now: datetime | None = None) -> list[PrayerTime]:
        """Run one scheduling step.

        Returns:
            Prayers fired on this tick
        """
        if self._stopped:
            return []

        now = now or self._now()
        schedule = self.get_schedule(now)
        fired: list[PrayerTime] = []

        for prayer in ADHAN_PRAYERS:
            key = (schedule.date, prayer)
            if key in self._fired:
                continue
            instant = schedule.get_time(prayer)
            if instant is None:
                continue
            if not self._should_fire(instant, now):
                continue

            self._fired.add(key)
            prayer_time = PrayerTime(name=prayer, time=instant)
            fired.append(prayer_time)
            logger.info(f"Prayer time reached: {prayer.display_name} ({instant:%Y-%m-%d %H:%M})")
            self._fire(prayer_time)

        self._previous_observed_instant = now
        return fired

    def _fire(self, prayer_time: PrayerTime) -> None:
        if self._event_bus:
            self._event_bus.publish(PrayerTimeReachedEvent(prayer_time=prayer_time))
        try:
            self._dispatcher.dispatch(prayer_time)
        except Exception as e:
            logger.error(f"Dispatch failed for {prayer_time.name.display_name}: {e}")

    def start(self) -> None:
        """Start ticking once per second."""
        if self.running:
            logger.warning("Scheduler is already running.")
            return
        self._stopped = False
        self._started_at = self._now()
        if self._ticker is not None:
            self._ticker.start(self._tick_from_timer, TICK_INTERVAL_SECONDS)
        logger.info("Scheduler started.")

    def _tick_from_timer(self) -> None:
        try:
            self.tick()
        except Exception:
            logger.exception("Scheduler tick failed")

    def stop(self) -> None:
        """Stop ticking; no prayer fires afterwards."""
        self._stopped = True
        if self._ticker is not None:
            self._ticker.stop()
        logger.info("Scheduler stopped.")

    def restart(self) -> None:
        """Stop, forget the last tick and start again.

        The first tick after a restart uses the cold-start window.
        """
        self.stop()
        self._previous_observed_instant = None
        self.start()
