"""Shared fixtures and test doubles."""

from collections.abc import Callable
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest

from hilal.domain.models import (
    CalculationMethod,
    Coordinates,
    PrayerSchedule,
    PrayerSettings,
    PrayerTime,
)
from hilal.services.ports import AudioPlayerPort, DispatcherPort, NotifierPort, TickerPort

MAKKAH = Coordinates(latitude=21.4225, longitude=39.8262)


class FakeNotifier(NotifierPort):
    """Records notifications."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = fail

    def notify(self, title: str, body: str) -> None:
        if self.fail:
            raise RuntimeError("notification daemon unavailable")
        self.sent.append((title, body))


class FakeAudioPlayer(AudioPlayerPort):
    """Records played files without producing sound."""

    def __init__(self, fail: bool = False) -> None:
        self.played: list[tuple[str, int]] = []
        self.stopped = 0
        self.fail = fail

    async def play(self, file_path: str, volume: int = 100) -> None:
        if self.fail:
            raise RuntimeError("audio device busy")
        self.played.append((file_path, volume))

    async def stop(self) -> None:
        self.stopped += 1

    def is_playing(self) -> bool:
        return False

    async def set_volume(self, volume: int) -> None:
        pass


class FakeTicker(TickerPort):
    """Ticker driven by the test instead of a timer."""

    def __init__(self) -> None:
        self.callback: Callable[[], None] | None = None
        self.interval: float | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self, callback: Callable[[], None], interval_seconds: float = 1.0) -> None:
        self.callback = callback
        self.interval = interval_seconds
        self._running = True

    def stop(self) -> None:
        self._running = False


class RecordingDispatcher(DispatcherPort):
    """Records dispatched prayers."""

    def __init__(self, fail: bool = False) -> None:
        self.dispatched: list[PrayerTime] = []
        self.fail = fail

    def dispatch(self, prayer_time: PrayerTime) -> None:
        self.dispatched.append(prayer_time)
        if self.fail:
            raise RuntimeError("sink exploded")


class StaticScheduleCache:
    """Schedule source returning synthetic schedules keyed by date."""

    def __init__(self, schedules: dict[date, PrayerSchedule], timezone: ZoneInfo = ZoneInfo("UTC")):
        self.schedules = schedules
        self.timezone = timezone
        self.requested: list[date] = []

    def get(self, today: date) -> PrayerSchedule:
        self.requested.append(today)
        return self.schedules.get(today) or _empty_schedule(today)


def _empty_schedule(day: date) -> PrayerSchedule:
    return PrayerSchedule(
        date=day, fajr=None, sunrise=None, dhuhr=None, asr=None, maghrib=None, isha=None
    )


def utc(day: date, hour: int, minute: int = 0, second: int = 0) -> datetime:
    """Aware UTC datetime on ``day``."""
    return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=UTC)


def synthetic_schedule(day: date) -> PrayerSchedule:
    """Round-number schedule in UTC."""
    return PrayerSchedule(
        date=day,
        fajr=utc(day, 5),
        sunrise=utc(day, 6),
        dhuhr=utc(day, 12),
        asr=utc(day, 15),
        maghrib=utc(day, 18),
        isha=utc(day, 19, 30),
    )


@pytest.fixture
def makkah_settings() -> PrayerSettings:
    """Makkah, Umm al-Qura, Shafi."""
    return PrayerSettings(
        coordinates=MAKKAH,
        timezone="Asia/Riyadh",
        city="Makkah",
        method=CalculationMethod.UMM_AL_QURA,
    )


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def audio_player() -> FakeAudioPlayer:
    return FakeAudioPlayer()


@pytest.fixture
def ticker() -> FakeTicker:
    return FakeTicker()
