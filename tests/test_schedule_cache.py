"""Tests for the daily schedule cache."""

from dataclasses import replace
from datetime import date

from hilal.domain.events import ScheduleComputedEvent
from hilal.domain.models import CalculationMethod, PrayerOffsets, PrayerSettings
from hilal.infrastructure.event_bus import InMemoryEventBus
from hilal.services.prayer_service import PrayerService
from hilal.services.schedule_cache import DailyScheduleCache

DAY = date(2024, 3, 20)


class TestDailyScheduleCache:
    """Recompute on date or settings change only."""

    def test_first_access_computes(self, makkah_settings: PrayerSettings) -> None:
        cache = DailyScheduleCache(PrayerService(makkah_settings))
        assert cache.current is None
        schedule = cache.get(DAY)
        assert schedule.date == DAY
        assert cache.current is schedule
        assert cache.recompute_count == 1

    def test_same_day_reuses(self, makkah_settings: PrayerSettings) -> None:
        cache = DailyScheduleCache(PrayerService(makkah_settings))
        first = cache.get(DAY)
        second = cache.get(DAY)
        assert first is second
        assert cache.recompute_count == 1

    def test_day_rollover_recomputes(self, makkah_settings: PrayerSettings) -> None:
        cache = DailyScheduleCache(PrayerService(makkah_settings))
        cache.get(DAY)
        tomorrow = cache.get(date(2024, 3, 21))
        assert tomorrow.date == date(2024, 3, 21)
        assert cache.recompute_count == 2

    def test_settings_change_recomputes(self, makkah_settings: PrayerSettings) -> None:
        service = PrayerService(makkah_settings)
        cache = DailyScheduleCache(service)
        before = cache.get(DAY)

        service.update_settings(replace(makkah_settings, offsets=PrayerOffsets(fajr=5)))
        after = cache.get(DAY)

        assert cache.recompute_count == 2
        assert (after.fajr - before.fajr).total_seconds() == 300

    def test_dispatch_only_change_keeps_schedule(self, makkah_settings: PrayerSettings) -> None:
        """Volume or muting does not affect the computed times."""
        service = PrayerService(makkah_settings)
        cache = DailyScheduleCache(service)
        cache.get(DAY)
        service.update_settings(replace(makkah_settings, volume=20, audio_enabled=False))
        cache.get(DAY)
        assert cache.recompute_count == 1

    def test_method_change_recomputes(self, makkah_settings: PrayerSettings) -> None:
        service = PrayerService(makkah_settings)
        cache = DailyScheduleCache(service)
        cache.get(DAY)
        service.update_settings(replace(makkah_settings, method=CalculationMethod.KARACHI))
        cache.get(DAY)
        assert cache.recompute_count == 2

    def test_invalidate(self, makkah_settings: PrayerSettings) -> None:
        cache = DailyScheduleCache(PrayerService(makkah_settings))
        cache.get(DAY)
        cache.invalidate()
        assert cache.current is None
        cache.get(DAY)
        assert cache.recompute_count == 2

    def test_publishes_event(self, makkah_settings: PrayerSettings) -> None:
        bus = InMemoryEventBus()
        received: list[ScheduleComputedEvent] = []
        bus.subscribe(ScheduleComputedEvent, received.append)

        cache = DailyScheduleCache(PrayerService(makkah_settings), event_bus=bus)
        cache.get(DAY)
        cache.get(DAY)

        assert len(received) == 1
        assert received[0].schedule.date == DAY
