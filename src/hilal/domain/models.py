"""Domain models and value objects."""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class ConfigurationError(ValueError):
    """Invalid settings, rejected before any calculation runs."""


class PrayerName(str, Enum):
    """The six daily times, in chronological order."""

    FAJR = "fajr"
    SUNRISE = "sunrise"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"

    @property
    def display_name(self) -> str:
        """English display name."""
        return self.value.capitalize()

    @property
    def arabic_name(self) -> str:
        """Arabic display name."""
        names = {
            PrayerName.FAJR: "الفجر",
            PrayerName.SUNRISE: "الشروق",
            PrayerName.DHUHR: "الظهر",
            PrayerName.ASR: "العصر",
            PrayerName.MAGHRIB: "المغرب",
            PrayerName.ISHA: "العشاء",
        }
        return names[self]

    @property
    def icon(self) -> str:
        """Emoji icon."""
        icons = {
            PrayerName.FAJR: "🌙",
            PrayerName.SUNRISE: "🌅",
            PrayerName.DHUHR: "☀️",
            PrayerName.ASR: "🌤️",
            PrayerName.MAGHRIB: "🌇",
            PrayerName.ISHA: "🌃",
        }
        return icons[self]

    @property
    def has_adhan(self) -> bool:
        """Sunrise is shown but never called."""
        return self is not PrayerName.SUNRISE


ADHAN_PRAYERS: tuple[PrayerName, ...] = tuple(p for p in PrayerName if p.has_adhan)


class Madhab(str, Enum):
    """School of jurisprudence used for the Asr shadow rule."""

    SHAFI = "Shafi"
    HANAFI = "Hanafi"

    @property
    def shadow_length(self) -> int:
        """Shadow factor of the Asr formula."""
        return 2 if self is Madhab.HANAFI else 1


class HighLatitudeRule(str, Enum):
    """Night-fraction rule bounding Fajr and Isha."""

    MIDDLE_OF_THE_NIGHT = "MiddleOfTheNight"
    SEVENTH_OF_THE_NIGHT = "SeventhOfTheNight"
    TWILIGHT_ANGLE = "TwilightAngle"

    @classmethod
    def recommended(cls, coordinates: "Coordinates") -> Self:
        """Rule suggested for a location."""
        if coordinates.latitude > 48:
            return cls.SEVENTH_OF_THE_NIGHT
        return cls.MIDDLE_OF_THE_NIGHT


class CalculationMethod(str, Enum):
    """Published calculation conventions."""

    MUSLIM_WORLD_LEAGUE = "MuslimWorldLeague"
    NORTH_AMERICA = "NorthAmerica"
    EGYPTIAN = "Egyptian"
    UMM_AL_QURA = "UmmAlQura"
    KARACHI = "Karachi"
    TEHRAN = "Tehran"
    DUBAI = "Dubai"
    KUWAIT = "Kuwait"
    QATAR = "Qatar"
    SINGAPORE = "Singapore"
    MOONSIGHTING_COMMITTEE = "MoonsightingCommittee"

    @property
    def display_name(self) -> str:
        """Human readable name."""
        names = {
            CalculationMethod.MUSLIM_WORLD_LEAGUE: "Muslim World League",
            CalculationMethod.NORTH_AMERICA: "Islamic Society of North America",
            CalculationMethod.EGYPTIAN: "Egyptian General Authority of Survey",
            CalculationMethod.UMM_AL_QURA: "Umm al-Qura University, Makkah",
            CalculationMethod.KARACHI: "University of Islamic Sciences, Karachi",
            CalculationMethod.TEHRAN: "Institute of Geophysics, University of Tehran",
            CalculationMethod.DUBAI: "Dubai",
            CalculationMethod.KUWAIT: "Kuwait",
            CalculationMethod.QATAR: "Qatar",
            CalculationMethod.SINGAPORE: "Majlis Ugama Islam Singapura",
            CalculationMethod.MOONSIGHTING_COMMITTEE: "Moonsighting Committee Worldwide",
        }
        return names[self]


class Rounding(str, Enum):
    """How computed instants snap to whole minutes."""

    NEAREST = "nearest"
    UP = "up"


class Shafaq(str, Enum):
    """Twilight colour used by the Moonsighting Committee Isha tables."""

    GENERAL = "general"
    AHMER = "ahmer"
    ABYAD = "abyad"


class MuezzinVoice(str, Enum):
    """Bundled adhan recordings."""

    MAKKAH = "makkah"
    MADINAH = "madinah"
    MISHARY = "mishary"
    KURTISHI = "kurtishi"
    ABDULBASIT = "abdulbasit"
    HUSARY = "husary"
    MINSHAWI = "minshawi"

    @property
    def display_name(self) -> str:
        """Recording name."""
        names = {
            MuezzinVoice.MAKKAH: "Masjid Al-Haram (Makkah)",
            MuezzinVoice.MADINAH: "Masjid An-Nabawi (Madinah)",
            MuezzinVoice.MISHARY: "Mishary Alafasy",
            MuezzinVoice.KURTISHI: "Mevlan Kurtishi",
            MuezzinVoice.ABDULBASIT: "Abdul Basit Abdus-Samad",
            MuezzinVoice.HUSARY: "Mahmoud Al-Husary",
            MuezzinVoice.MINSHAWI: "Muhammad Al-Minshawi",
        }
        return names[self]

    @property
    def filename(self) -> str:
        """Audio file name inside the audio directory."""
        if self is MuezzinVoice.KURTISHI:
            return "Mevlan Kurtishi.mp3"
        return f"{self.value}.mp3"


@dataclass(frozen=True)
class Coordinates:
    """Geographic position (immutable value object)."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Coordinate validation."""
        if not math.isfinite(self.latitude) or not -90 <= self.latitude <= 90:
            raise ConfigurationError(f"Invalid latitude: {self.latitude}")
        if not math.isfinite(self.longitude) or not -180 <= self.longitude <= 180:
            raise ConfigurationError(f"Invalid longitude: {self.longitude}")


@dataclass(frozen=True)
class PrayerOffsets:
    """Manual per-prayer adjustments in minutes."""

    fajr: int = 0
    sunrise: int = 0
    dhuhr: int = 0
    asr: int = 0
    maghrib: int = 0
    isha: int = 0

    def __post_init__(self) -> None:
        for prayer in PrayerName:
            value = getattr(self, prayer.value)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"Offset for {prayer.value} must be an integer: {value!r}")

    def get_offset(self, prayer: PrayerName) -> int:
        """Offset for the given prayer."""
        return getattr(self, prayer.value)

    def __add__(self, other: "PrayerOffsets") -> "PrayerOffsets":
        return PrayerOffsets(
            **{p.value: self.get_offset(p) + other.get_offset(p) for p in PrayerName}
        )

    def to_dict(self) -> dict[str, int]:
        """Dictionary form."""
        return {prayer.value: self.get_offset(prayer) for prayer in PrayerName}

    @classmethod
    def from_dict(cls, data: dict[str, int]) -> Self:
        """Build from a (possibly partial) dictionary."""
        unknown = set(data) - {p.value for p in PrayerName}
        if unknown:
            raise ConfigurationError(f"Unknown offset keys: {', '.join(sorted(unknown))}")
        return cls(**{key: data[key] for key in data})


@dataclass(frozen=True)
class PrayerTime:
    """A single scheduled instant."""

    name: PrayerName
    time: datetime

    @property
    def date(self) -> date:
        """Local calendar date of the instant."""
        return self.time.date()

    @property
    def time_str(self) -> str:
        """HH:MM form."""
        return self.time.strftime("%H:%M")


@dataclass(frozen=True)
class PrayerSchedule:
    """All six instants of one local calendar day.

    An instant is ``None`` when the sun never reaches the required altitude
    on that date and no high-latitude rule could resolve it.
    """

    date: date
    fajr: datetime | None
    sunrise: datetime | None
    dhuhr: datetime | None
    asr: datetime | None
    maghrib: datetime | None
    isha: datetime | None

    def get_time(self, prayer: PrayerName) -> datetime | None:
        """Instant of the given prayer, or None when unavailable."""
        return getattr(self, prayer.value)

    def all_prayer_times(self) -> list[PrayerTime]:
        """Available instants in chronological order of names."""
        return [
            PrayerTime(name=prayer, time=instant)
            for prayer in PrayerName
            if (instant := self.get_time(prayer)) is not None
        ]

    @property
    def is_complete(self) -> bool:
        """True when no instant is unavailable."""
        return all(self.get_time(prayer) is not None for prayer in PrayerName)

    @property
    def is_ordered(self) -> bool:
        """True when complete and strictly increasing."""
        if not self.is_complete:
            return False
        times = [self.get_time(prayer) for prayer in PrayerName]
        return all(a < b for a, b in zip(times, times[1:]))

    def with_times(self, **times: datetime | None) -> Self:
        """Copy with some instants replaced."""
        return replace(self, **times)

    def to_dict(self) -> dict[str, str | None]:
        """Dictionary form with ISO-8601 instants."""
        data: dict[str, str | None] = {"date": self.date.isoformat()}
        for prayer in PrayerName:
            instant = self.get_time(prayer)
            data[prayer.value] = instant.isoformat() if instant else None
        return data


@dataclass(frozen=True)
class PrayerSettings:
    """Everything that determines the schedule and how it is announced."""

    coordinates: Coordinates
    timezone: str = "UTC"
    city: str = ""
    method: CalculationMethod = CalculationMethod.UMM_AL_QURA
    madhab: Madhab = Madhab.SHAFI
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    shafaq: Shafaq = Shafaq.GENERAL
    offsets: PrayerOffsets = field(default_factory=PrayerOffsets)
    muezzin: MuezzinVoice = MuezzinVoice.MAKKAH
    audio_enabled: bool = True
    notifications_enabled: bool = True
    volume: int = 80

    def __post_init__(self) -> None:
        """Settings validation."""
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone: {self.timezone}") from e
        if not 0 <= self.volume <= 100:
            raise ConfigurationError(f"Invalid volume: {self.volume}")

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone object."""
        return ZoneInfo(self.timezone)

    @property
    def calculation_key(self) -> tuple:
        """Fields whose change invalidates a computed schedule."""
        return (
            self.coordinates,
            self.timezone,
            self.method,
            self.madhab,
            self.high_latitude_rule,
            self.shafaq,
            self.offsets,
        )

    def to_dict(self) -> dict:
        """Dictionary form."""
        return {
            "location": {
                "latitude": self.coordinates.latitude,
                "longitude": self.coordinates.longitude,
                "city": self.city,
                "timezone": self.timezone,
            },
            "method": self.method.value,
            "madhab": self.madhab.value,
            "high_latitude_rule": self.high_latitude_rule.value,
            "shafaq": self.shafaq.value,
            "offsets": self.offsets.to_dict(),
            "muezzin": self.muezzin.value,
            "audio_enabled": self.audio_enabled,
            "notifications_enabled": self.notifications_enabled,
            "volume": self.volume,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Build from a dictionary, rejecting unknown enum values."""
        location = data.get("location", {})
        try:
            return cls(
                coordinates=Coordinates(
                    latitude=float(location["latitude"]),
                    longitude=float(location["longitude"]),
                ),
                timezone=location.get("timezone", "UTC"),
                city=location.get("city", ""),
                method=CalculationMethod(data.get("method", CalculationMethod.UMM_AL_QURA.value)),
                madhab=Madhab(data.get("madhab", Madhab.SHAFI.value)),
                high_latitude_rule=HighLatitudeRule(
                    data.get("high_latitude_rule", HighLatitudeRule.MIDDLE_OF_THE_NIGHT.value)
                ),
                shafaq=Shafaq(data.get("shafaq", Shafaq.GENERAL.value)),
                offsets=PrayerOffsets.from_dict(data.get("offsets", {})),
                muezzin=MuezzinVoice(data.get("muezzin", MuezzinVoice.MAKKAH.value)),
                audio_enabled=bool(data.get("audio_enabled", True)),
                notifications_enabled=bool(data.get("notifications_enabled", True)),
                volume=int(data.get("volume", 80)),
            )
        except ConfigurationError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e
