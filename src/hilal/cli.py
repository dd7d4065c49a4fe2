"""Command-line interface for Hilal."""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from hilal import __version__
from hilal.domain.models import (
    CalculationMethod,
    ConfigurationError,
    HighLatitudeRule,
    Madhab,
    Shafaq,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="hilal",
        description="Prayer times and adhan scheduler",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"hilal {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the scheduler and web API")
    serve_parser.add_argument("--host", "-H", help="Server address (default: HILAL_HOST)")
    serve_parser.add_argument("--port", "-p", type=int, help="Server port (default: HILAL_PORT)")
    serve_parser.add_argument("--audio-dir", "-a", type=Path, help="Adhan recordings directory")
    serve_parser.add_argument(
        "--log-level",
        "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: HILAL_LOG_LEVEL)",
    )

    # times command
    times_parser = subparsers.add_parser("times", help="Show prayer times")
    times_parser.add_argument("--lat", type=float, required=True, help="Latitude")
    times_parser.add_argument("--lng", type=float, required=True, help="Longitude")
    times_parser.add_argument(
        "--method",
        "-m",
        choices=[m.value for m in CalculationMethod],
        default=CalculationMethod.UMM_AL_QURA.value,
        help="Calculation method (default: UmmAlQura)",
    )
    times_parser.add_argument(
        "--madhab",
        choices=[m.value for m in Madhab],
        default=Madhab.SHAFI.value,
        help="Asr convention (default: Shafi)",
    )
    times_parser.add_argument(
        "--rule",
        choices=[r.value for r in HighLatitudeRule],
        help="High-latitude rule (default: recommended for the latitude)",
    )
    times_parser.add_argument(
        "--shafaq",
        choices=[s.value for s in Shafaq],
        default=Shafaq.GENERAL.value,
        help="Twilight used for Moonsighting Committee Isha",
    )
    times_parser.add_argument("--timezone", "-t", help="IANA timezone (default: from coordinates)")
    times_parser.add_argument(
        "--days",
        "-d",
        type=int,
        default=1,
        help="Number of days (default: 1)",
    )

    # next command
    subparsers.add_parser("next", help="Show the next prayer for the configured location")

    return parser


def _hhmm(instant: datetime | None) -> str:
    return instant.strftime("%H:%M") if instant else "--:--"


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the web server."""
    import uvicorn

    from hilal.api.app import create_app
    from hilal.config import get_config, setup_logging

    config = get_config()
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.audio_dir:
        config.audio_dir = args.audio_dir
    if args.log_level:
        config.log_level = args.log_level

    setup_logging(config.log_level)
    app = create_app(config=config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


def cmd_times(args: argparse.Namespace) -> None:
    """Show prayer times."""
    from hilal.config import resolve_timezone
    from hilal.domain.models import Coordinates, PrayerSettings
    from hilal.services.prayer_service import PrayerService

    coordinates = Coordinates(latitude=args.lat, longitude=args.lng)
    settings = PrayerSettings(
        coordinates=coordinates,
        timezone=args.timezone or resolve_timezone(args.lat, args.lng),
        method=CalculationMethod(args.method),
        madhab=Madhab(args.madhab),
        high_latitude_rule=(
            HighLatitudeRule(args.rule) if args.rule else HighLatitudeRule.recommended(coordinates)
        ),
        shafaq=Shafaq(args.shafaq),
    )
    service = PrayerService(settings)

    schedules = service.calculate_range(service.now().date(), args.days)

    print(f"\n📍 Location: {args.lat:.4f}, {args.lng:.4f}")
    print(f"🌍 Timezone: {service.timezone_name}")
    print(f"🧭 Method: {settings.method.display_name} ({settings.madhab.value})")
    print()

    print("=" * 75)
    print(
        f"{'Date':<15} {'Fajr':>8} {'Sunrise':>8} {'Dhuhr':>8} {'Asr':>8} {'Maghrib':>8} {'Isha':>8}"
    )
    print("-" * 75)

    for schedule in schedules:
        print(
            f"{schedule.date.strftime('%d.%m.%Y'):<15} "
            f"{_hhmm(schedule.fajr):>8} "
            f"{_hhmm(schedule.sunrise):>8} "
            f"{_hhmm(schedule.dhuhr):>8} "
            f"{_hhmm(schedule.asr):>8} "
            f"{_hhmm(schedule.maghrib):>8} "
            f"{_hhmm(schedule.isha):>8}"
        )

    print("=" * 75)


def cmd_next(args: argparse.Namespace) -> None:
    """Show the next prayer and the time left."""
    from hilal.config import get_config
    from hilal.services.prayer_service import PrayerService

    service = PrayerService(get_config().to_settings())
    now = service.now()
    next_prayer = service.get_next_prayer(now)
    if next_prayer is None:
        print("No upcoming prayer time at this location.")
        return

    countdown = service.get_time_until_next_prayer(now)
    prayer = next_prayer.name
    print(f"{prayer.icon} {prayer.display_name} ({prayer.arabic_name}) at {next_prayer.time_str}")
    print(f"⏳ {countdown}")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        # Serve by default
        args = parser.parse_args(["serve"])

    commands = {
        "serve": cmd_serve,
        "times": cmd_times,
        "next": cmd_next,
    }

    cmd_func = commands.get(args.command)
    if cmd_func is None:
        parser.print_help()
        return 1

    try:
        cmd_func(args)
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
