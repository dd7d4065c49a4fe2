"""Prayer time calculation service.

The pipeline is ``SolarTime`` -> high-latitude resolution -> rounding ->
offsets -> local timezone. Module-level functions are pure; ``PrayerService``
binds them to the current settings.
"""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from hilal.domain.astronomy import SolarTime
from hilal.domain.high_latitude import night_duration, resolve_fajr, resolve_isha
from hilal.domain.methods import CalculationParameters, get_parameters
from hilal.domain.models import (
    CalculationMethod,
    ConfigurationError,
    Coordinates,
    HighLatitudeRule,
    Madhab,
    PrayerName,
    PrayerOffsets,
    PrayerSchedule,
    PrayerSettings,
    PrayerTime,
    Rounding,
    Shafaq,
)
from hilal.services.ports import PrayerTimeCalculatorPort

logger = logging.getLogger(__name__)


def _utc_instant(day: date, hours: float | None) -> datetime | None:
    """Fractional UTC hours of ``day`` as an aware datetime, truncated to the second."""
    if hours is None or not math.isfinite(hours):
        return None
    midnight = datetime(day.year, day.month, day.day, tzinfo=UTC)
    return midnight + timedelta(seconds=math.floor(hours * 3600))


def round_to_minute(instant: datetime | None, rounding: Rounding) -> datetime | None:
    """Snap an instant to a whole minute."""
    if instant is None:
        return instant
    floor = instant.replace(second=0, microsecond=0)
    remainder = instant - floor
    if rounding is Rounding.UP:
        return floor if not remainder else floor + timedelta(minutes=1)
    if remainder >= timedelta(seconds=30):
        return floor + timedelta(minutes=1)
    return floor


def apply_offset(instant: datetime | None, minutes: int) -> datetime | None:
    """Shift one instant by whole minutes; unavailable stays unavailable."""
    if instant is None:
        return None
    return instant + timedelta(minutes=minutes)


def apply_offsets(schedule: PrayerSchedule, offsets: PrayerOffsets) -> PrayerSchedule:
    """Shift every instant by its own offset.

    Ordering is not re-checked: a large offset may move a prayer past its
    neighbour.
    """
    return schedule.with_times(
        **{
            prayer.value: apply_offset(schedule.get_time(prayer), offsets.get_offset(prayer))
            for prayer in PrayerName
        }
    )


def calculate_prayer_times(
    target_date: date,
    coordinates: Coordinates,
    parameters: CalculationParameters,
    offsets: PrayerOffsets | None = None,
    tz: tzinfo = UTC,
) -> PrayerSchedule:
    """Compute the six instants of ``target_date`` at ``coordinates``.

    Args:
        target_date: Local calendar date
        coordinates: Validated position
        parameters: Convention constants with madhab and high-latitude rule
        offsets: Manual per-prayer minutes, added to the method adjustments
        tz: Timezone of the returned instants

    Returns:
        Schedule whose unavailable instants are ``None``
    """
    lat, lon = coordinates.latitude, coordinates.longitude
    tomorrow = target_date + timedelta(days=1)
    solar = SolarTime(target_date, lat, lon)
    solar_tomorrow = SolarTime(tomorrow, lat, lon)

    dhuhr = _utc_instant(target_date, solar.transit)
    sunrise = _utc_instant(target_date, solar.sunrise)
    sunset = _utc_instant(target_date, solar.sunset)
    asr = _utc_instant(target_date, solar.afternoon(parameters.madhab.shadow_length))
    night = night_duration(sunset, _utc_instant(tomorrow, solar_tomorrow.sunrise))

    fajr = _utc_instant(target_date, solar.hour_angle(-parameters.fajr_angle, after_transit=False))
    fajr = resolve_fajr(fajr, sunrise, night, parameters, lat, target_date)

    if parameters.isha_interval > 0:
        isha = apply_offset(sunset, parameters.isha_interval)
    else:
        isha = _utc_instant(target_date, solar.hour_angle(-parameters.isha_angle, after_transit=True))
        isha = resolve_isha(isha, sunset, night, parameters, lat, target_date)

    maghrib = sunset
    if parameters.maghrib_angle is not None and sunset is not None and isha is not None:
        angle_based = _utc_instant(
            target_date, solar.hour_angle(-parameters.maghrib_angle, after_transit=True)
        )
        if angle_based is not None and sunset < angle_based < isha:
            maghrib = angle_based

    raw = PrayerSchedule(
        date=target_date,
        fajr=fajr,
        sunrise=sunrise,
        dhuhr=dhuhr,
        asr=asr,
        maghrib=maghrib,
        isha=isha,
    )
    rounded = raw.with_times(
        **{p.value: round_to_minute(raw.get_time(p), parameters.rounding) for p in PrayerName}
    )
    adjusted = apply_offsets(rounded, parameters.method_adjustments + (offsets or PrayerOffsets()))
    return adjusted.with_times(
        **{
            p.value: instant.astimezone(tz) if (instant := adjusted.get_time(p)) else None
            for p in PrayerName
        }
    )


@dataclass(frozen=True)
class CalculationResult:
    """Outcome of :func:`try_calculate`: either a schedule or a rejection."""

    schedule: PrayerSchedule | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.schedule is not None


def try_calculate(
    target_date: date,
    latitude: float,
    longitude: float,
    *,
    method: CalculationMethod | str = CalculationMethod.UMM_AL_QURA,
    madhab: Madhab | str = Madhab.SHAFI,
    high_latitude_rule: HighLatitudeRule | str = HighLatitudeRule.MIDDLE_OF_THE_NIGHT,
    shafaq: Shafaq | str = Shafaq.GENERAL,
    offsets: PrayerOffsets | dict[str, int] | None = None,
    timezone: str = "UTC",
) -> CalculationResult:
    """Validate raw inputs and calculate; never raises."""
    try:
        coordinates = Coordinates(latitude=latitude, longitude=longitude)
        parameters = get_parameters(
            CalculationMethod(method),
            Madhab(madhab),
            HighLatitudeRule(high_latitude_rule),
            Shafaq(shafaq),
        )
        if not isinstance(offsets, PrayerOffsets):
            offsets = PrayerOffsets.from_dict(offsets or {})
        tz = ZoneInfo(timezone)
    except (ConfigurationError, ValueError, TypeError, ZoneInfoNotFoundError) as e:
        logger.warning(f"Calculation rejected: {e}")
        return CalculationResult(error=str(e))

    return CalculationResult(
        schedule=calculate_prayer_times(target_date, coordinates, parameters, offsets, tz)
    )


@dataclass(frozen=True)
class Countdown:
    """Time left until a target instant."""

    hours: int
    minutes: int
    seconds: int
    total: int

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"


def get_countdown(now: datetime, target: datetime) -> Countdown:
    """Countdown from ``now`` to ``target``; zero once it has passed."""
    total = max(0, math.floor((target - now).total_seconds()))
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return Countdown(hours=hours, minutes=minutes, seconds=seconds, total=total)


class PrayerService(PrayerTimeCalculatorPort):
    """Prayer time calculation service bound to the current settings."""

    def __init__(self, settings: PrayerSettings) -> None:
        """
        Initialize prayer service.

        Args:
            settings: Validated location, convention and offsets
        """
        self._settings = settings
        self._parameters = self._build_parameters(settings)

    @staticmethod
    def _build_parameters(settings: PrayerSettings) -> CalculationParameters:
        return get_parameters(
            settings.method, settings.madhab, settings.high_latitude_rule, settings.shafaq
        )

    @property
    def settings(self) -> PrayerSettings:
        """Current settings."""
        return self._settings

    @property
    def parameters(self) -> CalculationParameters:
        """Resolved convention parameters."""
        return self._parameters

    @property
    def timezone(self) -> ZoneInfo:
        """Timezone object."""
        return self._settings.tzinfo

    @property
    def timezone_name(self) -> str:
        """Timezone name."""
        return self._settings.timezone

    def update_settings(self, settings: PrayerSettings) -> None:
        """Replace the settings; the next calculation uses them."""
        self._settings = settings
        self._parameters = self._build_parameters(settings)
        logger.info(
            f"Settings updated: {settings.method.value}, {settings.madhab.value}, "
            f"{settings.coordinates.latitude:.4f},{settings.coordinates.longitude:.4f}"
        )

    def now(self) -> datetime:
        """Current time in the configured timezone."""
        return datetime.now(self.timezone)

    def _localize(self, now: datetime | None) -> datetime:
        if now is None:
            return self.now()
        if now.tzinfo is None:
            return now.replace(tzinfo=self.timezone)
        return now.astimezone(self.timezone)

    def calculate(self, target_date: date) -> PrayerSchedule:
        """Compute the schedule of the given local date."""
        schedule = calculate_prayer_times(
            target_date,
            self._settings.coordinates,
            self._parameters,
            self._settings.offsets,
            self.timezone,
        )
        logger.debug(f"Calculated schedule for {target_date}: {schedule.to_dict()}")
        return schedule

    def calculate_range(self, start_date: date, days: int) -> list[PrayerSchedule]:
        """Compute schedules for ``days`` consecutive dates."""
        return [self.calculate(start_date + timedelta(days=i)) for i in range(days)]

    def get_current_prayer(self, now: datetime | None = None) -> PrayerName | None:
        """The latest prayer whose time has come, Isha before today's Fajr."""
        now = self._localize(now)
        schedule = self.calculate(now.date())

        current: PrayerName | None = None
        for prayer_time in schedule.all_prayer_times():
            if prayer_time.time <= now:
                current = prayer_time.name
        if current is None:
            return PrayerName.ISHA if schedule.isha is not None else None
        return current

    def get_next_prayer(self, now: datetime | None = None) -> PrayerTime | None:
        """The first instant after ``now``, looking into tomorrow after Isha."""
        now = self._localize(now)
        for day in (now.date(), now.date() + timedelta(days=1)):
            for prayer_time in self.calculate(day).all_prayer_times():
                if prayer_time.time > now:
                    return prayer_time
        return None

    def get_time_until_next_prayer(self, now: datetime | None = None) -> Countdown | None:
        """Countdown to the next prayer."""
        now = self._localize(now)
        next_prayer = self.get_next_prayer(now)
        if next_prayer is None:
            return None
        return get_countdown(now, next_prayer.time)
