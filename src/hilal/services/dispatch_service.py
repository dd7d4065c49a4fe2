"""Announces fired prayers through the notification and audio sinks."""

import asyncio
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Any

from hilal.domain.events import (
    AdhanFinishedEvent,
    AdhanStartedEvent,
    DispatchFailedEvent,
    NotificationSentEvent,
)
from hilal.domain.models import MuezzinVoice, PrayerName, PrayerSettings, PrayerTime
from hilal.services.ports import AudioPlayerPort, DispatcherPort, EventBusPort, NotifierPort

logger = logging.getLogger(__name__)


class DispatchService(DispatcherPort):
    """Notification and adhan playback, each behind its own enabled flag.

    Nothing raised by a sink reaches the scheduler.
    """

    def __init__(
        self,
        notifier: NotifierPort,
        audio_player: AudioPlayerPort,
        settings: PrayerSettings,
        event_bus: EventBusPort | None = None,
        audio_dir: Path | None = None,
    ) -> None:
        """
        Initialize dispatch service.

        Args:
            notifier: Desktop notification sink
            audio_player: Audio playback adapter
            settings: Current settings (enabled flags, muezzin, volume)
            event_bus: Event bus (optional)
            audio_dir: Directory holding the adhan recordings
        """
        self._notifier = notifier
        self._audio_player = audio_player
        self._settings = settings
        self._event_bus = event_bus
        self._audio_dir = audio_dir or Path(__file__).parent.parent / "assets" / "audio"
        self._is_playing = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def settings(self) -> PrayerSettings:
        """Current settings."""
        return self._settings

    def update_settings(self, settings: PrayerSettings) -> None:
        """Replace the settings."""
        self._settings = settings

    def get_adhan_path(self, voice: MuezzinVoice | None = None) -> Path:
        """Path of the adhan recording."""
        if voice is None:
            voice = self._settings.muezzin
        return self._audio_dir / voice.filename

    def _publish_failure(self, sink: str, message: str, prayer: PrayerName | None) -> None:
        logger.error(message)
        if self._event_bus:
            self._event_bus.publish(DispatchFailedEvent(error_message=message, sink=sink, prayer=prayer))

    def dispatch(self, prayer_time: PrayerTime) -> None:
        """Announce a prayer. Returns immediately."""
        if self._settings.notifications_enabled:
            self.notify(prayer_time)
        if self._settings.audio_enabled:
            self._spawn(self.play_adhan(prayer_time.name))

    def notify(self, prayer_time: PrayerTime) -> None:
        """Show the prayer notification."""
        prayer = prayer_time.name
        title = f"{prayer.icon} {prayer.display_name} | {prayer.arabic_name}"
        body = f"It is time for {prayer.display_name} prayer ({prayer_time.time_str})."
        try:
            self._notifier.notify(title, body)
        except Exception as e:
            self._publish_failure("notification", f"Notification failed: {e}", prayer)
            return
        if self._event_bus:
            self._event_bus.publish(NotificationSentEvent(prayer=prayer, title=title))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        """Run ``coro`` on the running loop without waiting for it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning("No running event loop, adhan playback skipped.")
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def play_adhan(self, prayer: PrayerName) -> None:
        """
        Play the adhan.

        Args:
            prayer: Prayer being announced
        """
        if self._is_playing:
            logger.warning("An adhan is already playing, new one not started.")
            return

        volume = self._settings.volume
        adhan_path = self.get_adhan_path()

        if not adhan_path.exists():
            self._publish_failure("audio", f"Adhan file not found: {adhan_path}", prayer)
            return

        try:
            self._is_playing = True
            logger.info(f"Playing {prayer.display_name} adhan (volume: {volume}%)")

            if self._event_bus:
                self._event_bus.publish(AdhanStartedEvent(prayer=prayer, volume=volume))

            await self._audio_player.play(str(adhan_path), volume=volume)

            logger.info(f"{prayer.display_name} adhan finished.")

            if self._event_bus:
                self._event_bus.publish(AdhanFinishedEvent(prayer=prayer))

        except Exception as e:
            self._publish_failure("audio", f"Adhan playback failed: {e}", prayer)
        finally:
            self._is_playing = False

    async def stop_adhan(self) -> None:
        """Stop the adhan if it is playing."""
        if self._is_playing or self._audio_player.is_playing():
            await self._audio_player.stop()
            self._is_playing = False
            logger.info("Adhan stopped.")

    def is_playing(self) -> bool:
        """Is an adhan playing?"""
        return self._is_playing or self._audio_player.is_playing()
