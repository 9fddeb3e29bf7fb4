"""Audio duration probing via ffprobe."""

from __future__ import annotations

import math
from pathlib import Path

import structlog

from fact_shorts.config import Settings, settings as default_settings
from fact_shorts.tools.process import ProcessRunner, run_process

logger = structlog.get_logger()


class AudioDurationProber:
    """Measure the playable length of an audio file.

    Never fails outward: any execution or parse problem is logged as a
    warning and the configured fallback duration is returned instead.
    """

    def __init__(self, settings: Settings | None = None, runner: ProcessRunner = run_process):
        self._settings = settings or default_settings
        self._runner = runner

    @property
    def fallback_duration(self) -> float:
        return self._settings.fallback_duration

    def build_command(self, audio_path: Path | str) -> list[str]:
        return [
            self._settings.resolve_ffprobe(),
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(audio_path),
        ]

    async def probe(self, audio_path: Path | str) -> float:
        result = await self._runner(self.build_command(audio_path), self._settings.probe_timeout)

        if not result.ok:
            logger.warning(
                "ffprobe.failed",
                audio_path=str(audio_path),
                reason=result.describe_failure(),
                fallback=self.fallback_duration,
            )
            return self.fallback_duration

        raw = result.stdout.strip()
        try:
            duration = float(raw.splitlines()[0]) if raw else float("nan")
        except ValueError:
            duration = float("nan")

        if not math.isfinite(duration) or duration <= 0:
            logger.warning(
                "ffprobe.unparseable",
                audio_path=str(audio_path),
                output=raw[:100],
                fallback=self.fallback_duration,
            )
            return self.fallback_duration

        logger.info("ffprobe.done", audio_path=str(audio_path), duration=duration)
        return duration
