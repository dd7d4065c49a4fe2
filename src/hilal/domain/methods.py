"""Calculation parameter registry.

Angles and adjustments reproduce the published values of each convention;
changing any of them breaks agreement with official timetables.
"""

from dataclasses import dataclass, field, replace

from hilal.domain.models import (
    CalculationMethod,
    HighLatitudeRule,
    Madhab,
    PrayerOffsets,
    Rounding,
    Shafaq,
)


@dataclass(frozen=True)
class CalculationParameters:
    """Constants of one convention plus the user's madhab and rule."""

    method: CalculationMethod
    fajr_angle: float
    isha_angle: float = 0.0
    isha_interval: int = 0  # minutes after Maghrib, replaces isha_angle when set
    maghrib_angle: float | None = None
    method_adjustments: PrayerOffsets = field(default_factory=PrayerOffsets)
    madhab: Madhab = Madhab.SHAFI
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    rounding: Rounding = Rounding.NEAREST
    shafaq: Shafaq = Shafaq.GENERAL

    def night_portions(self) -> tuple[float, float]:
        """Fraction of the night bounding Fajr and Isha."""
        if self.high_latitude_rule is HighLatitudeRule.SEVENTH_OF_THE_NIGHT:
            return 1 / 7, 1 / 7
        if self.high_latitude_rule is HighLatitudeRule.TWILIGHT_ANGLE:
            return self.fajr_angle / 60, self.isha_angle / 60
        return 1 / 2, 1 / 2


METHOD_PARAMETERS: dict[CalculationMethod, CalculationParameters] = {
    CalculationMethod.MUSLIM_WORLD_LEAGUE: CalculationParameters(
        method=CalculationMethod.MUSLIM_WORLD_LEAGUE,
        fajr_angle=18,
        isha_angle=17,
        method_adjustments=PrayerOffsets(dhuhr=1),
    ),
    CalculationMethod.NORTH_AMERICA: CalculationParameters(
        method=CalculationMethod.NORTH_AMERICA,
        fajr_angle=15,
        isha_angle=15,
        method_adjustments=PrayerOffsets(dhuhr=1),
    ),
    CalculationMethod.EGYPTIAN: CalculationParameters(
        method=CalculationMethod.EGYPTIAN,
        fajr_angle=19.5,
        isha_angle=17.5,
        method_adjustments=PrayerOffsets(dhuhr=1),
    ),
    CalculationMethod.UMM_AL_QURA: CalculationParameters(
        method=CalculationMethod.UMM_AL_QURA,
        fajr_angle=18.5,
        isha_interval=90,
    ),
    CalculationMethod.KARACHI: CalculationParameters(
        method=CalculationMethod.KARACHI,
        fajr_angle=18,
        isha_angle=18,
        method_adjustments=PrayerOffsets(dhuhr=1),
    ),
    CalculationMethod.TEHRAN: CalculationParameters(
        method=CalculationMethod.TEHRAN,
        fajr_angle=17.7,
        isha_angle=14,
        maghrib_angle=4.5,
    ),
    CalculationMethod.DUBAI: CalculationParameters(
        method=CalculationMethod.DUBAI,
        fajr_angle=18.2,
        isha_angle=18.2,
        method_adjustments=PrayerOffsets(sunrise=-3, dhuhr=3, asr=3, maghrib=3),
    ),
    CalculationMethod.KUWAIT: CalculationParameters(
        method=CalculationMethod.KUWAIT,
        fajr_angle=18,
        isha_angle=17.5,
    ),
    CalculationMethod.QATAR: CalculationParameters(
        method=CalculationMethod.QATAR,
        fajr_angle=18,
        isha_interval=90,
    ),
    CalculationMethod.SINGAPORE: CalculationParameters(
        method=CalculationMethod.SINGAPORE,
        fajr_angle=20,
        isha_angle=18,
        method_adjustments=PrayerOffsets(dhuhr=1),
        rounding=Rounding.UP,
    ),
    CalculationMethod.MOONSIGHTING_COMMITTEE: CalculationParameters(
        method=CalculationMethod.MOONSIGHTING_COMMITTEE,
        fajr_angle=18,
        isha_angle=18,
        method_adjustments=PrayerOffsets(dhuhr=5, maghrib=3),
    ),
}


def get_parameters(
    method: CalculationMethod,
    madhab: Madhab = Madhab.SHAFI,
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT,
    shafaq: Shafaq = Shafaq.GENERAL,
) -> CalculationParameters:
    """Parameters of a convention combined with the user's choices.

    ``shafaq`` only changes the Moonsighting Committee Isha tables.
    """
    return replace(
        METHOD_PARAMETERS[method],
        madhab=madhab,
        high_latitude_rule=high_latitude_rule,
        shafaq=shafaq,
    )
