"""Application state and dependencies."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from hilal.domain.models import PrayerSettings
from hilal.infrastructure.audio import get_best_player
from hilal.infrastructure.event_bus import InMemoryEventBus
from hilal.infrastructure.notifier import PlyerNotifier
from hilal.infrastructure.ticker import APSchedulerTicker
from hilal.services.dispatch_service import DispatchService
from hilal.services.ports import AudioPlayerPort, NotifierPort, TickerPort
from hilal.services.prayer_service import PrayerService
from hilal.services.schedule_cache import DailyScheduleCache
from hilal.services.scheduler_service import SchedulerService


@dataclass
class AppState:
    """Application state container."""

    settings: PrayerSettings
    prayer_service: PrayerService
    schedule_cache: DailyScheduleCache
    dispatch_service: DispatchService
    scheduler_service: SchedulerService
    ticker: TickerPort
    event_bus: InMemoryEventBus
    notifier: NotifierPort
    audio_player: AudioPlayerPort
    started_at: datetime
    audio_dir: Path
    language: str = "en"


# Global application state (singleton)
_app_state: AppState | None = None


def initialize_app_state(
    settings: PrayerSettings,
    audio_dir: Path | None = None,
    ticker: TickerPort | None = None,
    notifier: NotifierPort | None = None,
    audio_player: AudioPlayerPort | None = None,
    language: str = "en",
) -> AppState:
    """
    Initialize application state.

    Args:
        settings: Validated prayer settings
        audio_dir: Directory of the adhan recordings
        ticker: Periodic timer (default: APScheduler interval job)
        notifier: Notification sink (default: plyer)
        audio_player: Audio player (default: best available)
        language: Babel locale for display dates

    Returns:
        Initialized AppState
    """
    global _app_state

    if _app_state is not None:
        return _app_state

    if audio_dir is None:
        audio_dir = Path(__file__).parent.parent / "assets" / "audio"

    # Infrastructure
    event_bus = InMemoryEventBus()
    ticker = ticker or APSchedulerTicker()
    notifier = notifier or PlyerNotifier()
    audio_player = audio_player or get_best_player()

    # Services
    prayer_service = PrayerService(settings)
    schedule_cache = DailyScheduleCache(prayer_service, event_bus=event_bus)
    dispatch_service = DispatchService(
        notifier=notifier,
        audio_player=audio_player,
        settings=settings,
        event_bus=event_bus,
        audio_dir=audio_dir,
    )
    scheduler_service = SchedulerService(
        schedule_cache=schedule_cache,
        dispatcher=dispatch_service,
        ticker=ticker,
        event_bus=event_bus,
    )

    _app_state = AppState(
        settings=settings,
        prayer_service=prayer_service,
        schedule_cache=schedule_cache,
        dispatch_service=dispatch_service,
        scheduler_service=scheduler_service,
        ticker=ticker,
        event_bus=event_bus,
        notifier=notifier,
        audio_player=audio_player,
        started_at=datetime.now(prayer_service.timezone),
        audio_dir=audio_dir,
        language=language,
    )

    return _app_state


def get_app_state() -> AppState:
    """Get current application state."""
    if _app_state is None:
        raise RuntimeError("Application state not initialized")
    return _app_state


async def shutdown_app_state() -> None:
    """Shutdown application state."""
    global _app_state

    if _app_state is not None:
        _app_state.scheduler_service.stop()
        await _app_state.dispatch_service.stop_adhan()
        if isinstance(_app_state.ticker, APSchedulerTicker):
            _app_state.ticker.shutdown()
        _app_state = None
