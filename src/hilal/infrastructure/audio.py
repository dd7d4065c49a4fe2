"""Command-line audio players for adhan playback."""

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from hilal.services.ports import AudioPlayerPort

logger = logging.getLogger(__name__)


class CommandAudioPlayer(AudioPlayerPort, ABC):
    """Plays a file by running an external player process."""

    executable: str = ""

    def __init__(self) -> None:
        self._process: asyncio.subprocess.Process | None = None
        self._volume: int = 100

    @abstractmethod
    def _get_command(self, file_path: str, volume: int) -> list[str]:
        """Command line playing ``file_path``."""

    @classmethod
    def is_available(cls) -> bool:
        """Is the executable on PATH?"""
        return shutil.which(cls.executable) is not None

    async def play(self, file_path: str, volume: int = 100) -> None:
        """Play a file and wait for it to end."""
        if not Path(file_path).exists():
            raise FileNotFoundError(f"Audio file not found: {file_path}")
        if not self.is_available():
            raise RuntimeError(f"{self.executable} is not installed")

        await self.stop()
        await self.set_volume(volume)

        cmd = self._get_command(file_path, self._volume)
        logger.debug(f"Starting playback: {' '.join(cmd)}")
        self._process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )

        process = self._process
        _, stderr = await process.communicate()
        if process.returncode not in (0, None) and self._process is process:
            message = stderr.decode().strip() if stderr else ""
            logger.warning(f"{self.executable} exited with {process.returncode}: {message}")
        if self._process is process:
            self._process = None

    async def stop(self) -> None:
        """Terminate the player process."""
        process, self._process = self._process, None
        if process is None or process.returncode is not None:
            return
        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=2.0)
        except TimeoutError:
            process.kill()
            await process.wait()
        except ProcessLookupError:
            pass  # already gone

    def is_playing(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def set_volume(self, volume: int) -> None:
        if not 0 <= volume <= 100:
            raise ValueError(f"Invalid volume: {volume}")
        self._volume = volume


class Mpg123Player(CommandAudioPlayer):
    """mpg123, best for MP3."""

    executable = "mpg123"

    def _get_command(self, file_path: str, volume: int) -> list[str]:
        # --scale takes 0-32768
        return ["mpg123", "--quiet", "--scale", str(int(volume / 100 * 32768)), file_path]


class FfplayPlayer(CommandAudioPlayer):
    """ffplay from FFmpeg."""

    executable = "ffplay"

    def _get_command(self, file_path: str, volume: int) -> list[str]:
        return [
            "ffplay",
            "-nodisp",
            "-autoexit",
            "-volume",
            str(volume),
            "-loglevel",
            "quiet",
            file_path,
        ]


class PulseAudioPlayer(CommandAudioPlayer):
    """paplay for PulseAudio / PipeWire."""

    executable = "paplay"

    def _get_command(self, file_path: str, volume: int) -> list[str]:
        # --volume takes 0-65536
        return ["paplay", f"--volume={int(volume / 100 * 65536)}", file_path]


class AfplayPlayer(CommandAudioPlayer):
    """afplay on macOS."""

    executable = "afplay"

    def _get_command(self, file_path: str, volume: int) -> list[str]:
        return ["afplay", "-v", f"{volume / 100:.2f}", file_path]


class SilentPlayer(AudioPlayerPort):
    """Used when no player is installed; every play fails loudly in the log."""

    async def play(self, file_path: str, volume: int = 100) -> None:
        raise RuntimeError("No audio player available")

    async def stop(self) -> None:
        return None

    def is_playing(self) -> bool:
        return False

    async def set_volume(self, volume: int) -> None:
        return None


PLAYER_PREFERENCE: tuple[type[CommandAudioPlayer], ...] = (
    Mpg123Player,
    FfplayPlayer,
    PulseAudioPlayer,
    AfplayPlayer,
)


def get_best_player() -> AudioPlayerPort:
    """First installed player in order of preference."""
    for player_class in PLAYER_PREFERENCE:
        if player_class.is_available():
            logger.info(f"Audio player selected: {player_class.executable}")
            return player_class()

    logger.warning("No audio player found; install mpg123, ffplay, paplay or afplay.")
    return SilentPlayer()
