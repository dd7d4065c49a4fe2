"""Domain layer - Value objects, conventions and the solar equations."""

from hilal.domain.methods import CalculationParameters, get_parameters
from hilal.domain.models import (
    ADHAN_PRAYERS,
    CalculationMethod,
    ConfigurationError,
    Coordinates,
    HighLatitudeRule,
    Madhab,
    MuezzinVoice,
    PrayerName,
    PrayerOffsets,
    PrayerSchedule,
    PrayerSettings,
    PrayerTime,
    Rounding,
    Shafaq,
)

__all__ = [
    "ADHAN_PRAYERS",
    "CalculationMethod",
    "CalculationParameters",
    "ConfigurationError",
    "Coordinates",
    "HighLatitudeRule",
    "Madhab",
    "MuezzinVoice",
    "PrayerName",
    "PrayerOffsets",
    "PrayerSchedule",
    "PrayerSettings",
    "PrayerTime",
    "Rounding",
    "Shafaq",
    "get_parameters",
]
