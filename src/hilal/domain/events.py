"""Domain events published on the event bus."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from hilal.domain.models import PrayerName, PrayerSchedule, PrayerTime


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True, kw_only=True)
class ScheduleComputedEvent(DomainEvent):
    """A new daily schedule replaced the cached one."""

    schedule: PrayerSchedule


@dataclass(frozen=True, kw_only=True)
class PrayerTimeReachedEvent(DomainEvent):
    """The tick scheduler crossed a prayer instant."""

    prayer_time: PrayerTime


@dataclass(frozen=True, kw_only=True)
class NotificationSentEvent(DomainEvent):
    """A desktop notification was handed to the notifier."""

    prayer: PrayerName
    title: str


@dataclass(frozen=True, kw_only=True)
class AdhanStartedEvent(DomainEvent):
    """Adhan playback started."""

    prayer: PrayerName
    volume: int


@dataclass(frozen=True, kw_only=True)
class AdhanFinishedEvent(DomainEvent):
    """Adhan playback finished."""

    prayer: PrayerName


@dataclass(frozen=True, kw_only=True)
class DispatchFailedEvent(DomainEvent):
    """A notification or audio sink failed; the scheduler carried on."""

    error_message: str
    sink: str
    prayer: PrayerName | None = None
