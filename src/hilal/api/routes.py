"""API Routes."""

from datetime import date, datetime
from typing import Annotated

from babel.core import UnknownLocaleError
from babel.dates import format_date
from fastapi import APIRouter, Depends, HTTPException, Query

from hilal import __version__
from hilal.api.dependencies import AppState, get_app_state
from hilal.api.schemas import (
    ApiResponse,
    CalculationSchema,
    CurrentStateSchema,
    LocationSchema,
    MethodSchema,
    PrayerOffsetsSchema,
    PrayerTimeSchema,
    PrayerTimesSchema,
    SystemStatusSchema,
)
from hilal.domain.methods import METHOD_PARAMETERS
from hilal.domain.models import (
    ConfigurationError,
    HighLatitudeRule,
    PrayerName,
    PrayerSchedule,
)

router = APIRouter()

MAX_RANGE_DAYS = 31

HIJRI_MONTHS = [
    "Muharram",
    "Safar",
    "Rabi al-Awwal",
    "Rabi al-Thani",
    "Jumada al-Ula",
    "Jumada al-Akhirah",
    "Rajab",
    "Shaban",
    "Ramadan",
    "Shawwal",
    "Dhu al-Qadah",
    "Dhu al-Hijjah",
]


def get_hijri_date(gregorian: date) -> tuple[int, int, int]:
    """Tabular Hijri date (year, month, day); may differ by a day from sighting."""
    jd = gregorian.toordinal() + 1721425
    l_val = jd - 1948440 + 10632
    n = (l_val - 1) // 10631
    l2 = l_val - 10631 * n + 354
    j = ((10985 - l2) // 5316) * ((50 * l2) // 17719) + (l2 // 5670) * ((43 * l2) // 15238)
    l3 = l2 - ((30 - j) // 15) * ((17719 * j) // 50) - (j // 16) * ((15238 * j) // 43) + 29
    month = (24 * l3) // 709
    day = l3 - (709 * month) // 24
    year = 30 * n + j - 30
    return year, month, day


def format_hijri_date(gregorian: date) -> str:
    """Hijri date for display, e.g. ``10 Ramadan 1445``."""
    year, month, day = get_hijri_date(gregorian)
    return f"{day} {HIJRI_MONTHS[month - 1]} {year}"


def format_uptime(started_at: datetime, now: datetime) -> str:
    """Elapsed time as HH:MM:SS."""
    total_seconds = max(0, int((now - started_at).total_seconds()))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _format_day(day: date, language: str) -> str:
    try:
        return format_date(day, "EEEE, d MMMM yyyy", locale=language)
    except (UnknownLocaleError, ValueError):
        return format_date(day, "EEEE, d MMMM yyyy", locale="en")


def _build_times_schema(schedule: PrayerSchedule, language: str) -> PrayerTimesSchema:
    prayers = []
    for prayer in PrayerName:
        instant = schedule.get_time(prayer)
        prayers.append(
            PrayerTimeSchema(
                name=prayer,
                display_name=prayer.display_name,
                arabic_name=prayer.arabic_name,
                icon=prayer.icon,
                time=instant.strftime("%H:%M") if instant else None,
                has_adhan=prayer.has_adhan,
            )
        )

    return PrayerTimesSchema(
        date=schedule.date,
        date_formatted=_format_day(schedule.date, language),
        hijri_date=format_hijri_date(schedule.date),
        prayers=prayers,
    )


# ============== State & Status ==============


@router.get("/status", response_model=SystemStatusSchema)
async def get_status(state: Annotated[AppState, Depends(get_app_state)]) -> SystemStatusSchema:
    """System status."""
    uptime = format_uptime(state.started_at, state.prayer_service.now())

    return SystemStatusSchema(
        version=__version__,
        uptime=uptime,
        scheduler_running=state.scheduler_service.running,
        fired_count=state.scheduler_service.fired_count,
        schedule_recomputes=state.schedule_cache.recompute_count,
        audio_player=state.audio_player.__class__.__name__,
        muezzin=state.settings.muezzin,
        audio_enabled=state.settings.audio_enabled,
        notifications_enabled=state.settings.notifications_enabled,
    )


@router.get("/current", response_model=CurrentStateSchema)
async def get_current_state(
    state: Annotated[AppState, Depends(get_app_state)],
) -> CurrentStateSchema:
    """Current state (clock, prayer, countdown)."""
    service = state.prayer_service
    settings = state.settings
    now = service.now()
    current = service.get_current_prayer(now)
    next_prayer = service.get_next_prayer(now)
    countdown = service.get_time_until_next_prayer(now)

    return CurrentStateSchema(
        current_time=now.strftime("%H:%M:%S"),
        current_date=_format_day(now.date(), state.language),
        hijri_date=format_hijri_date(now.date()),
        location=LocationSchema(
            latitude=settings.coordinates.latitude,
            longitude=settings.coordinates.longitude,
            city=settings.city,
            timezone=settings.timezone,
        ),
        calculation=CalculationSchema(
            method=settings.method,
            method_display=settings.method.display_name,
            madhab=settings.madhab,
            high_latitude_rule=settings.high_latitude_rule,
            shafaq=settings.shafaq,
            offsets=PrayerOffsetsSchema(**settings.offsets.to_dict()),
        ),
        current_prayer=current,
        current_prayer_display=current.display_name if current else None,
        next_prayer=next_prayer.name if next_prayer else None,
        next_prayer_display=next_prayer.name.display_name if next_prayer else None,
        next_prayer_time=next_prayer.time_str if next_prayer else None,
        countdown=str(countdown) if countdown else None,
        is_adhan_playing=state.dispatch_service.is_playing(),
    )


# ============== Prayer Times ==============


@router.get("/times/today", response_model=PrayerTimesSchema)
async def get_today_times(state: Annotated[AppState, Depends(get_app_state)]) -> PrayerTimesSchema:
    """Today's prayer times."""
    schedule = state.scheduler_service.get_schedule()
    return _build_times_schema(schedule, state.language)


@router.get("/times/week", response_model=list[PrayerTimesSchema])
async def get_week_times(
    state: Annotated[AppState, Depends(get_app_state)],
    days: Annotated[int, Query(ge=1, le=MAX_RANGE_DAYS)] = 7,
) -> list[PrayerTimesSchema]:
    """Prayer times of the coming days, today included."""
    today = state.prayer_service.now().date()
    schedules = state.prayer_service.calculate_range(today, days)
    return [_build_times_schema(schedule, state.language) for schedule in schedules]


@router.get("/times/{target_date}", response_model=PrayerTimesSchema)
async def get_times_for_date(
    target_date: date,
    state: Annotated[AppState, Depends(get_app_state)],
) -> PrayerTimesSchema:
    """Prayer times of an arbitrary date."""
    try:
        schedule = state.prayer_service.calculate(target_date)
    except (ConfigurationError, OverflowError) as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _build_times_schema(schedule, state.language)


# ============== Scheduler ==============


@router.post("/scheduler/restart", response_model=ApiResponse)
async def restart_scheduler(state: Annotated[AppState, Depends(get_app_state)]) -> ApiResponse:
    """Restart the tick scheduler and recompute today's schedule."""
    state.schedule_cache.invalidate()
    state.scheduler_service.restart()
    schedule = state.scheduler_service.get_schedule()
    return ApiResponse(
        success=True,
        message="Scheduler restarted.",
        data=schedule.to_dict(),
    )


# ============== Audio ==============


@router.post("/audio/stop", response_model=ApiResponse)
async def stop_audio(state: Annotated[AppState, Depends(get_app_state)]) -> ApiResponse:
    """Stop the playing adhan."""
    await state.dispatch_service.stop_adhan()
    return ApiResponse(success=True, message="Audio stopped.")


# ============== Utility ==============


@router.get("/methods", response_model=list[MethodSchema])
async def get_methods(
    state: Annotated[AppState, Depends(get_app_state)],
) -> list[MethodSchema]:
    """Available calculation methods with their constants."""
    recommended = HighLatitudeRule.recommended(state.settings.coordinates)
    return [
        MethodSchema(
            value=method,
            display_name=method.display_name,
            fajr_angle=params.fajr_angle,
            isha_angle=params.isha_angle,
            isha_interval=params.isha_interval,
            maghrib_angle=params.maghrib_angle,
            recommended_rule=recommended,
        )
        for method, params in METHOD_PARAMETERS.items()
    ]


@router.get("/prayers")
async def get_prayer_names() -> list[dict[str, str | bool]]:
    """Prayer names."""
    return [
        {
            "value": p.value,
            "display_name": p.display_name,
            "arabic_name": p.arabic_name,
            "icon": p.icon,
            "has_adhan": p.has_adhan,
        }
        for p in PrayerName
    ]

