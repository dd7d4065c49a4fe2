"""Service layer - Calculation pipeline, schedule cache, scheduler and dispatch."""

from hilal.services.dispatch_service import DispatchService
from hilal.services.ports import (
    AudioPlayerPort,
    DispatcherPort,
    EventBusPort,
    NotifierPort,
    PrayerTimeCalculatorPort,
    TickerPort,
)
from hilal.services.prayer_service import (
    CalculationResult,
    Countdown,
    PrayerService,
    apply_offset,
    apply_offsets,
    calculate_prayer_times,
    get_countdown,
    try_calculate,
)
from hilal.services.schedule_cache import DailyScheduleCache
from hilal.services.scheduler_service import FiredRegistry, SchedulerService

__all__ = [
    "AudioPlayerPort",
    "CalculationResult",
    "Countdown",
    "DailyScheduleCache",
    "DispatchService",
    "DispatcherPort",
    "EventBusPort",
    "FiredRegistry",
    "NotifierPort",
    "PrayerService",
    "PrayerTimeCalculatorPort",
    "SchedulerService",
    "TickerPort",
    "apply_offset",
    "apply_offsets",
    "calculate_prayer_times",
    "get_countdown",
    "try_calculate",
]
