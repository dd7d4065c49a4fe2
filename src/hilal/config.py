"""Configuration management."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from timezonefinder import TimezoneFinder

from hilal.domain.models import (
    CalculationMethod,
    ConfigurationError,
    Coordinates,
    HighLatitudeRule,
    Madhab,
    MuezzinVoice,
    PrayerOffsets,
    PrayerSettings,
    Shafaq,
)

logger = logging.getLogger(__name__)

# Masjid al-Haram, used when no location is configured
DEFAULT_LATITUDE = 21.4225
DEFAULT_LONGITUDE = 39.8262
DEFAULT_CITY = "Makkah"


def _get_default_audio_dir() -> Path:
    """Get default audio directory."""
    return Path(__file__).parent / "assets" / "audio"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def parse_offsets(text: str) -> PrayerOffsets:
    """Parse ``"fajr=2,isha=-1"`` into offsets."""
    if not text.strip():
        return PrayerOffsets()
    values: dict[str, int] = {}
    for item in text.split(","):
        name, sep, minutes = item.partition("=")
        if not sep:
            raise ConfigurationError(f"Invalid offset entry: {item!r}")
        try:
            values[name.strip().lower()] = int(minutes)
        except ValueError as e:
            raise ConfigurationError(f"Invalid offset minutes: {item!r}") from e
    return PrayerOffsets.from_dict(values)


def resolve_timezone(latitude: float, longitude: float) -> str:
    """Timezone name at a position, UTC when none is found (open sea)."""
    name = TimezoneFinder().timezone_at(lat=latitude, lng=longitude)
    if name is None:
        logger.warning(f"No timezone found for {latitude},{longitude}; using UTC")
        return "UTC"
    return name


@dataclass
class AppConfig:
    """Application configuration."""

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"
    language: str = "en"

    # File paths
    audio_dir: Path = field(default_factory=_get_default_audio_dir)

    # Location and calculation
    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    city: str = DEFAULT_CITY
    timezone: str | None = None
    method: str = CalculationMethod.UMM_AL_QURA.value
    madhab: str = Madhab.SHAFI.value
    high_latitude_rule: str = HighLatitudeRule.MIDDLE_OF_THE_NIGHT.value
    shafaq: str = Shafaq.GENERAL.value
    offsets: str = ""

    # Dispatch
    muezzin: str = MuezzinVoice.MAKKAH.value
    audio_enabled: bool = True
    notifications_enabled: bool = True
    volume: int = 80

    @classmethod
    def from_env(cls) -> Self:
        """Load configuration from environment variables."""
        try:
            return cls(
                host=os.getenv("HILAL_HOST", "127.0.0.1"),
                port=int(os.getenv("HILAL_PORT", "8080")),
                log_level=os.getenv("HILAL_LOG_LEVEL", "INFO"),
                language=os.getenv("HILAL_LANGUAGE", "en"),
                audio_dir=Path(os.getenv("HILAL_AUDIO_DIR", str(_get_default_audio_dir()))),
                latitude=float(os.getenv("HILAL_LATITUDE", str(DEFAULT_LATITUDE))),
                longitude=float(os.getenv("HILAL_LONGITUDE", str(DEFAULT_LONGITUDE))),
                city=os.getenv("HILAL_CITY", DEFAULT_CITY),
                timezone=os.getenv("HILAL_TIMEZONE") or None,
                method=os.getenv("HILAL_METHOD", CalculationMethod.UMM_AL_QURA.value),
                madhab=os.getenv("HILAL_MADHAB", Madhab.SHAFI.value),
                high_latitude_rule=os.getenv(
                    "HILAL_HIGH_LATITUDE_RULE", HighLatitudeRule.MIDDLE_OF_THE_NIGHT.value
                ),
                shafaq=os.getenv("HILAL_SHAFAQ", Shafaq.GENERAL.value),
                offsets=os.getenv("HILAL_OFFSETS", ""),
                muezzin=os.getenv("HILAL_MUEZZIN", MuezzinVoice.MAKKAH.value),
                audio_enabled=_env_bool("HILAL_AUDIO_ENABLED", True),
                notifications_enabled=_env_bool("HILAL_NOTIFICATIONS_ENABLED", True),
                volume=int(os.getenv("HILAL_VOLUME", "80")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}") from e

    def to_settings(self) -> PrayerSettings:
        """Validated prayer settings."""
        coordinates = Coordinates(latitude=self.latitude, longitude=self.longitude)
        try:
            return PrayerSettings(
                coordinates=coordinates,
                timezone=self.timezone or resolve_timezone(self.latitude, self.longitude),
                city=self.city,
                method=CalculationMethod(self.method),
                madhab=Madhab(self.madhab),
                high_latitude_rule=HighLatitudeRule(self.high_latitude_rule),
                shafaq=Shafaq(self.shafaq),
                offsets=parse_offsets(self.offsets),
                muezzin=MuezzinVoice(self.muezzin),
                audio_enabled=self.audio_enabled,
                notifications_enabled=self.notifications_enabled,
                volume=self.volume,
            )
        except ConfigurationError:
            raise
        except ValueError as e:
            raise ConfigurationError(str(e)) from e


_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get application configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def setup_logging(level: str = "INFO") -> None:
    """Setup application logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
