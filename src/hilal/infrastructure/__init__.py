"""Infrastructure layer - Adapters and implementations."""

from hilal.infrastructure.audio import Mpg123Player, get_best_player
from hilal.infrastructure.event_bus import InMemoryEventBus
from hilal.infrastructure.notifier import PlyerNotifier
from hilal.infrastructure.ticker import APSchedulerTicker

__all__ = [
    "APSchedulerTicker",
    "InMemoryEventBus",
    "Mpg123Player",
    "PlyerNotifier",
    "get_best_player",
]
