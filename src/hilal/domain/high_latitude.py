"""High-latitude resolution of Fajr and Isha.

Where twilight never ends (or never begins) the angle-based times do not
exist, and near that limit they drift deep into the night. Both prayers are
bounded by a fraction of the night, measured from sunset to the next
sunrise.
"""

import calendar
from datetime import date, datetime, timedelta

from hilal.domain.methods import CalculationParameters
from hilal.domain.models import CalculationMethod, Shafaq

MOONSIGHTING_SEVENTH_LATITUDE = 55


def night_duration(sunset: datetime | None, next_sunrise: datetime | None) -> timedelta | None:
    """Length of the night following ``sunset``."""
    if sunset is None or next_sunrise is None:
        return None
    return next_sunrise - sunset


def days_since_solstice(day_of_year: int, year: int, latitude: float) -> int:
    """Days elapsed since the winter solstice of the given hemisphere."""
    days_in_year = 366 if calendar.isleap(year) else 365
    if latitude >= 0:
        days = day_of_year + 10
        if days >= days_in_year:
            days -= days_in_year
    else:
        days = day_of_year - (173 if calendar.isleap(year) else 172)
        if days < 0:
            days += days_in_year
    return days


def _seasonal_minutes(a: float, b: float, c: float, d: float, days: int) -> float:
    if days < 91:
        return a + (b - a) / 91 * days
    if days < 137:
        return b + (c - b) / 46 * (days - 91)
    if days < 183:
        return c + (d - c) / 46 * (days - 137)
    if days < 229:
        return d + (c - d) / 46 * (days - 183)
    if days < 275:
        return c + (b - c) / 46 * (days - 229)
    return b + (a - b) / 91 * (days - 275)


def season_adjusted_morning_twilight(latitude: float, day: date, sunrise: datetime) -> datetime:
    """Moonsighting Committee Fajr: a seasonal number of minutes before sunrise."""
    lat = abs(latitude)
    minutes = _seasonal_minutes(
        75 + 28.65 / 55 * lat,
        75 + 19.44 / 55 * lat,
        75 + 32.74 / 55 * lat,
        75 + 48.10 / 55 * lat,
        days_since_solstice(day.timetuple().tm_yday, day.year, latitude),
    )
    return sunrise - timedelta(seconds=round(minutes * 60))


def season_adjusted_evening_twilight(
    latitude: float, day: date, sunset: datetime, shafaq: Shafaq = Shafaq.GENERAL
) -> datetime:
    """Moonsighting Committee Isha: a seasonal number of minutes after sunset."""
    lat = abs(latitude)
    if shafaq is Shafaq.AHMER:
        coefficients = (
            62 + 17.40 / 55 * lat,
            62 - 7.16 / 55 * lat,
            62 + 5.12 / 55 * lat,
            62 + 19.44 / 55 * lat,
        )
    elif shafaq is Shafaq.ABYAD:
        coefficients = (
            75 + 25.60 / 55 * lat,
            75 + 7.16 / 55 * lat,
            75 + 36.84 / 55 * lat,
            75 + 81.84 / 55 * lat,
        )
    else:
        coefficients = (
            75 + 25.60 / 55 * lat,
            75 + 2.050 / 55 * lat,
            75 - 9.210 / 55 * lat,
            75 + 6.140 / 55 * lat,
        )
    minutes = _seasonal_minutes(
        *coefficients, days_since_solstice(day.timetuple().tm_yday, day.year, latitude)
    )
    return sunset + timedelta(seconds=round(minutes * 60))


def resolve_fajr(
    fajr: datetime | None,
    sunrise: datetime | None,
    night: timedelta | None,
    parameters: CalculationParameters,
    latitude: float,
    day: date,
) -> datetime | None:
    """Fajr no earlier than the night-fraction bound before sunrise."""
    if sunrise is None or night is None:
        return fajr

    if parameters.method is CalculationMethod.MOONSIGHTING_COMMITTEE:
        if latitude >= MOONSIGHTING_SEVENTH_LATITUDE:
            fajr = sunrise - night / 7
        safe = season_adjusted_morning_twilight(latitude, day, sunrise)
    else:
        portion, _ = parameters.night_portions()
        safe = sunrise - night * portion

    if fajr is None or safe > fajr:
        return safe
    return fajr


def resolve_isha(
    isha: datetime | None,
    sunset: datetime | None,
    night: timedelta | None,
    parameters: CalculationParameters,
    latitude: float,
    day: date,
) -> datetime | None:
    """Angle-based Isha no later than the night-fraction bound after sunset."""
    if sunset is None or night is None:
        return isha

    if parameters.method is CalculationMethod.MOONSIGHTING_COMMITTEE:
        if latitude >= MOONSIGHTING_SEVENTH_LATITUDE:
            isha = sunset + night / 7
        safe = season_adjusted_evening_twilight(latitude, day, sunset, parameters.shafaq)
    else:
        _, portion = parameters.night_portions()
        safe = sunset + night * portion

    if isha is None or safe < isha:
        return safe
    return isha
