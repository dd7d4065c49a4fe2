"""Service layer interfaces (ports)."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date

from hilal.domain.events import DomainEvent
from hilal.domain.models import PrayerSchedule, PrayerTime


class PrayerTimeCalculatorPort(ABC):
    """Prayer time calculation interface (port)."""

    @abstractmethod
    def calculate(self, target_date: date) -> PrayerSchedule:
        """Compute the schedule of the given local date."""

    @abstractmethod
    def calculate_range(self, start_date: date, days: int) -> list[PrayerSchedule]:
        """Compute schedules for ``days`` consecutive dates."""


class NotifierPort(ABC):
    """Desktop notification sink (port).

    Implementations are fire-and-forget and must not raise.
    """

    @abstractmethod
    def notify(self, title: str, body: str) -> None:
        """Show a notification."""


class AudioPlayerPort(ABC):
    """Audio playback interface (port)."""

    @abstractmethod
    async def play(self, file_path: str, volume: int = 100) -> None:
        """Play a file until it ends."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop playback."""

    @abstractmethod
    def is_playing(self) -> bool:
        """Is something playing right now?"""

    @abstractmethod
    async def set_volume(self, volume: int) -> None:
        """Set volume (0-100)."""


class DispatcherPort(ABC):
    """Receives each prayer instant the scheduler fires (port)."""

    @abstractmethod
    def dispatch(self, prayer_time: PrayerTime) -> None:
        """Announce a prayer. Must return promptly."""


class TickerPort(ABC):
    """Periodic timer driving the tick scheduler (port)."""

    @abstractmethod
    def start(self, callback: Callable[[], None], interval_seconds: float = 1.0) -> None:
        """Invoke ``callback`` every ``interval_seconds``."""

    @abstractmethod
    def stop(self) -> None:
        """Stop invoking the callback."""

    @property
    @abstractmethod
    def running(self) -> bool:
        """Is the timer active?"""


class EventBusPort(ABC):
    """Event bus interface (port)."""

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Publish an event."""

    @abstractmethod
    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: Callable[[DomainEvent], None],
    ) -> None:
        """Subscribe to an event type."""
