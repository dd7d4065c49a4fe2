"""Tests for the tick scheduler."""

from datetime import date, timedelta

import pytest
from conftest import (
    FakeTicker,
    RecordingDispatcher,
    StaticScheduleCache,
    synthetic_schedule,
    utc,
)

from hilal.domain.events import PrayerTimeReachedEvent
from hilal.domain.models import ADHAN_PRAYERS, PrayerName
from hilal.infrastructure.event_bus import InMemoryEventBus
from hilal.services.scheduler_service import FiredRegistry, SchedulerService

DAY = date(2024, 3, 20)
DHUHR = utc(DAY, 12)


@pytest.fixture
def cache() -> StaticScheduleCache:
    tomorrow = DAY + timedelta(days=1)
    return StaticScheduleCache(
        {DAY: synthetic_schedule(DAY), tomorrow: synthetic_schedule(tomorrow)}
    )


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def scheduler(cache: StaticScheduleCache, dispatcher: RecordingDispatcher) -> SchedulerService:
    return SchedulerService(cache, dispatcher)


def _names(dispatcher: RecordingDispatcher) -> list[PrayerName]:
    return [pt.name for pt in dispatcher.dispatched]


class TestCrossing:
    """A prayer fires when its instant falls between two ticks."""

    def test_fires_once_at_instant(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        """Ticks at T-2, T-1, T, T+1 fire exactly once, on the tick at T."""
        scheduler.tick(DHUHR - timedelta(seconds=10))
        results = [
            scheduler.tick(DHUHR + timedelta(seconds=offset)) for offset in (-2, -1, 0, 1)
        ]

        assert [len(r) for r in results] == [0, 0, 1, 0]
        assert _names(dispatcher) == [PrayerName.DHUHR]
        assert dispatcher.dispatched[0].time == DHUHR

    def test_missed_ticks_fire_once(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        """A gap from T-5 to T+5 still fires the prayer once."""
        scheduler.tick(DHUHR - timedelta(seconds=5))
        fired = scheduler.tick(DHUHR + timedelta(seconds=5))
        scheduler.tick(DHUHR + timedelta(seconds=6))

        assert [pt.name for pt in fired] == [PrayerName.DHUHR]
        assert _names(dispatcher) == [PrayerName.DHUHR]

    def test_long_gap_fires_each_crossed_prayer(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        """A suspend over several prayers fires each of them once, in order."""
        scheduler.tick(utc(DAY, 11))
        scheduler.tick(utc(DAY, 18, 30))
        assert _names(dispatcher) == [PrayerName.DHUHR, PrayerName.ASR, PrayerName.MAGHRIB]

    def test_no_fire_between_prayers(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        scheduler.tick(utc(DAY, 13))
        scheduler.tick(utc(DAY, 13, 0, 1))
        assert dispatcher.dispatched == []

    def test_sunrise_never_fires(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        scheduler.tick(utc(DAY, 5, 59, 59))
        scheduler.tick(utc(DAY, 6, 0, 1))
        assert dispatcher.dispatched == []

    def test_previous_instant_recorded(self, scheduler: SchedulerService) -> None:
        now = utc(DAY, 9)
        scheduler.tick(now)
        assert scheduler.previous_observed_instant == now


class TestColdStart:
    """First tick with no previous instant."""

    @pytest.mark.parametrize("offset", [-2, -1, 0, 1, 2])
    def test_within_two_seconds_fires(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher, offset: int
    ) -> None:
        scheduler.tick(DHUHR + timedelta(seconds=offset))
        scheduler.tick(DHUHR + timedelta(seconds=offset + 1))
        assert _names(dispatcher) == [PrayerName.DHUHR]

    @pytest.mark.parametrize("offset", [-3, 3, 60])
    def test_outside_window_does_not_fire(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher, offset: int
    ) -> None:
        scheduler.tick(DHUHR + timedelta(seconds=offset))
        assert dispatcher.dispatched == []

    def test_past_prayers_not_replayed(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        """Starting in the evening does not fire the day's earlier prayers."""
        scheduler.tick(utc(DAY, 18, 10))
        assert dispatcher.dispatched == []


class TestDeduplication:
    """At most one fire per (date, prayer)."""

    def test_clock_moved_back(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        scheduler.tick(DHUHR - timedelta(seconds=1))
        scheduler.tick(DHUHR)
        scheduler.tick(DHUHR - timedelta(seconds=30))
        scheduler.tick(DHUHR + timedelta(seconds=1))
        assert _names(dispatcher) == [PrayerName.DHUHR]
        assert scheduler.has_fired(DAY, PrayerName.DHUHR)

    def test_next_day_fires_again(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        tomorrow = DAY + timedelta(days=1)
        scheduler.tick(DHUHR - timedelta(seconds=1))
        scheduler.tick(DHUHR)
        scheduler.tick(utc(tomorrow, 11, 59, 59))
        scheduler.tick(utc(tomorrow, 12))
        dhuhrs = [pt for pt in dispatcher.dispatched if pt.name is PrayerName.DHUHR]
        assert [pt.date for pt in dhuhrs] == [DAY, tomorrow]

    def test_unavailable_instant_skipped(self, dispatcher: RecordingDispatcher) -> None:
        schedule = synthetic_schedule(DAY).with_times(isha=None)
        scheduler = SchedulerService(StaticScheduleCache({DAY: schedule}), dispatcher)
        scheduler.tick(utc(DAY, 19))
        scheduler.tick(utc(DAY, 23))
        assert dispatcher.dispatched == []


class TestFiredRegistry:
    """Bounded registry."""

    def test_membership(self) -> None:
        registry = FiredRegistry()
        registry.add((DAY, PrayerName.FAJR))
        assert (DAY, PrayerName.FAJR) in registry
        assert (DAY, PrayerName.ASR) not in registry

    def test_cleared_past_limit(self) -> None:
        """Past the limit the registry keeps only the newest key."""
        registry = FiredRegistry(limit=120)
        for i in range(24):
            for prayer in ADHAN_PRAYERS:
                registry.add((DAY + timedelta(days=i), prayer))
        assert len(registry) == 120

        newest = (DAY + timedelta(days=24), PrayerName.FAJR)
        registry.add(newest)
        assert len(registry) == 1
        assert newest in registry


class TestFailures:
    """Sink failures never stop the scheduler."""

    def test_dispatch_failure_swallowed(self, cache: StaticScheduleCache) -> None:
        dispatcher = RecordingDispatcher(fail=True)
        scheduler = SchedulerService(cache, dispatcher)

        scheduler.tick(utc(DAY, 11, 59, 59))
        scheduler.tick(utc(DAY, 12))
        scheduler.tick(utc(DAY, 14, 59, 59))
        scheduler.tick(utc(DAY, 15))

        assert _names(dispatcher) == [PrayerName.DHUHR, PrayerName.ASR]
        assert scheduler.has_fired(DAY, PrayerName.DHUHR)

    def test_reached_event_published(
        self, cache: StaticScheduleCache, dispatcher: RecordingDispatcher
    ) -> None:
        bus = InMemoryEventBus()
        events: list[PrayerTimeReachedEvent] = []
        bus.subscribe(PrayerTimeReachedEvent, events.append)
        scheduler = SchedulerService(cache, dispatcher, event_bus=bus)

        scheduler.tick(utc(DAY, 11, 59, 59))
        scheduler.tick(utc(DAY, 12))

        assert [e.prayer_time.name for e in events] == [PrayerName.DHUHR]


class TestLifecycle:
    """Start, stop and restart."""

    def test_start_registers_ticker(
        self, cache: StaticScheduleCache, dispatcher: RecordingDispatcher, ticker: FakeTicker
    ) -> None:
        scheduler = SchedulerService(cache, dispatcher, ticker=ticker, clock=lambda: utc(DAY, 9))
        scheduler.start()

        assert scheduler.running
        assert ticker.interval == 1.0
        assert scheduler.started_at == utc(DAY, 9)

    def test_timer_callback_ticks(
        self, cache: StaticScheduleCache, dispatcher: RecordingDispatcher, ticker: FakeTicker
    ) -> None:
        clock = iter([utc(DAY, 9), utc(DAY, 11, 59, 59), utc(DAY, 12)])
        scheduler = SchedulerService(cache, dispatcher, ticker=ticker, clock=lambda: next(clock))
        scheduler.start()
        ticker.callback()
        ticker.callback()
        assert _names(dispatcher) == [PrayerName.DHUHR]

    def test_timer_callback_survives_errors(
        self, dispatcher: RecordingDispatcher, ticker: FakeTicker
    ) -> None:
        class BrokenCache(StaticScheduleCache):
            def get(self, today: date):
                raise RuntimeError("boom")

        scheduler = SchedulerService(
            BrokenCache({}), dispatcher, ticker=ticker, clock=lambda: utc(DAY, 12)
        )
        scheduler.start()
        ticker.callback()
        assert scheduler.running

    def test_no_fire_after_stop(
        self, scheduler: SchedulerService, dispatcher: RecordingDispatcher
    ) -> None:
        scheduler.tick(DHUHR - timedelta(seconds=10))
        scheduler.stop()
        assert scheduler.tick(DHUHR) == []
        assert dispatcher.dispatched == []

    def test_stop_stops_ticker(
        self, cache: StaticScheduleCache, dispatcher: RecordingDispatcher, ticker: FakeTicker
    ) -> None:
        scheduler = SchedulerService(cache, dispatcher, ticker=ticker, clock=lambda: utc(DAY, 9))
        scheduler.start()
        scheduler.stop()
        assert not ticker.running
        assert not scheduler.running

    def test_restart_reenables_cold_start(
        self, cache: StaticScheduleCache, dispatcher: RecordingDispatcher, ticker: FakeTicker
    ) -> None:
        """After a restart the first tick uses the two-second window."""
        scheduler = SchedulerService(cache, dispatcher, ticker=ticker, clock=lambda: utc(DAY, 9))
        scheduler.start()
        scheduler.tick(utc(DAY, 11, 0))

        scheduler.restart()
        assert scheduler.previous_observed_instant is None
        assert scheduler.running

        # No crossing from 11:00 is considered; 12:00:01 lands in the window
        scheduler.tick(DHUHR + timedelta(seconds=1))
        assert _names(dispatcher) == [PrayerName.DHUHR]

    def test_restart_skips_crossings_during_downtime(
        self, cache: StaticScheduleCache, dispatcher: RecordingDispatcher, ticker: FakeTicker
    ) -> None:
        scheduler = SchedulerService(cache, dispatcher, ticker=ticker, clock=lambda: utc(DAY, 9))
        scheduler.start()
        scheduler.tick(utc(DAY, 11))
        scheduler.restart()
        scheduler.tick(utc(DAY, 13))
        assert dispatcher.dispatched == []
