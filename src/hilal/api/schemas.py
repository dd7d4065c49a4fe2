"""Pydantic schemas for API."""

from datetime import date
from typing import Annotated

from pydantic import BaseModel, Field

from hilal.domain.models import (
    CalculationMethod,
    HighLatitudeRule,
    Madhab,
    MuezzinVoice,
    PrayerName,
    Shafaq,
)


class LocationSchema(BaseModel):
    """Location schema."""

    latitude: Annotated[float, Field(ge=-90, le=90, description="Latitude")]
    longitude: Annotated[float, Field(ge=-180, le=180, description="Longitude")]
    city: str = Field(default="", description="City name")
    timezone: str = Field(default="UTC", description="IANA timezone")


class PrayerOffsetsSchema(BaseModel):
    """Manual offsets (minutes)."""

    fajr: int = 0
    sunrise: int = 0
    dhuhr: int = 0
    asr: int = 0
    maghrib: int = 0
    isha: int = 0


class CalculationSchema(BaseModel):
    """Active calculation convention."""

    method: CalculationMethod
    method_display: str
    madhab: Madhab
    high_latitude_rule: HighLatitudeRule
    shafaq: Shafaq
    offsets: PrayerOffsetsSchema


class PrayerTimeSchema(BaseModel):
    """Single prayer time."""

    name: PrayerName
    display_name: str
    arabic_name: str
    icon: str
    time: str | None  # HH:MM, None when the sun never reaches the angle
    has_adhan: bool


class PrayerTimesSchema(BaseModel):
    """Prayer times of one day."""

    date: date
    date_formatted: str
    hijri_date: str
    prayers: list[PrayerTimeSchema]


class CurrentStateSchema(BaseModel):
    """Current state: clock, prayer and countdown."""

    current_time: str
    current_date: str
    hijri_date: str
    location: LocationSchema
    calculation: CalculationSchema
    current_prayer: PrayerName | None
    current_prayer_display: str | None
    next_prayer: PrayerName | None
    next_prayer_display: str | None
    next_prayer_time: str | None
    countdown: str | None
    is_adhan_playing: bool


class SystemStatusSchema(BaseModel):
    """System status."""

    version: str
    uptime: str
    scheduler_running: bool
    fired_count: Annotated[int, Field(ge=0)]
    schedule_recomputes: Annotated[int, Field(ge=0)]
    audio_player: str
    muezzin: MuezzinVoice
    audio_enabled: bool
    notifications_enabled: bool


class MethodSchema(BaseModel):
    """Calculation method with its constants."""

    value: CalculationMethod
    display_name: str
    fajr_angle: float
    isha_angle: float
    isha_interval: int
    maghrib_angle: float | None
    recommended_rule: HighLatitudeRule | None = None


class ApiResponse(BaseModel):
    """Generic API response."""

    success: bool
    message: str
    data: dict | list | None = None
