"""Slideshow composition — image sequence + narration muxed by ffmpeg."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Sequence

import structlog

from fact_shorts.config import Settings, settings as default_settings
from fact_shorts.errors import VideoCompositionError
from fact_shorts.models.media import AudioAsset, StagingFrame, VideoAsset
from fact_shorts.tools.process import ProcessRunner, run_process
from fact_shorts.tools.scratch import ScratchStorage

logger = structlog.get_logger()


def seconds_per_image(duration: float, frame_count: int) -> float:
    """How long each frame stays on screen so the frames span *duration*."""
    if frame_count < 1:
        raise VideoCompositionError("Cannot compose a video from zero frames")
    return duration / frame_count


def letterbox_filter(width: int, height: int) -> str:
    """Scale to fit inside width x height, then pad centered."""
    return (
        f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
        f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2"
    )


def build_compose_command(
    ffmpeg: str,
    audio_path: Path | str,
    input_pattern: Path | str,
    duration: float,
    per_image: float,
    output_path: Path | str,
    width: int = 1280,
    height: int = 720,
    audio_bitrate: str = "192k",
) -> list[str]:
    return [
        ffmpeg, "-y",
        "-i", str(audio_path),
        "-loop", "1",
        "-framerate", f"1/{per_image}",
        "-i", str(input_pattern),
        "-c:v", "libx264",
        "-c:a", "aac",
        "-b:a", audio_bitrate,
        "-shortest",
        "-pix_fmt", "yuv420p",
        "-vf", letterbox_filter(width, height),
        "-map", "0:a:0",
        "-map", "1:v:0",
        "-t", f"{duration}",
        str(output_path),
    ]


class VideoComposer:
    """Run ffmpeg once to turn staged frames plus narration into an MP4.

    There is no fallback: any encoder failure fails the run.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        runner: ProcessRunner = run_process,
        clock: Callable[[], float] = time.time,
        scratch: ScratchStorage | None = None,
    ):
        self._settings = settings or default_settings
        self._runner = runner
        self._clock = clock
        self._scratch = scratch or ScratchStorage(self._settings.work_path)

    def output_path(self, output_dir: Path) -> Path:
        return output_dir / f"video_{int(self._clock() * 1000)}.mp4"

    async def compose(
        self,
        audio: AudioAsset,
        frames: Sequence[StagingFrame],
        input_pattern: Path,
        output_dir: Path,
    ) -> VideoAsset:
        per_image = seconds_per_image(audio.duration, len(frames))
        self._scratch.create_dir(output_dir)
        output_path = self.output_path(output_dir)
        width, height = self._settings.video_width, self._settings.video_height

        command = build_compose_command(
            self._settings.resolve_ffmpeg(),
            audio.path,
            input_pattern,
            audio.duration,
            per_image,
            output_path,
            width=width,
            height=height,
            audio_bitrate=self._settings.audio_bitrate,
        )

        logger.info(
            "ffmpeg.compose.start",
            frames=len(frames),
            duration=audio.duration,
            seconds_per_image=per_image,
            output_path=str(output_path),
        )
        result = await self._runner(command, self._settings.encode_timeout)
        if not result.ok:
            logger.error("ffmpeg.compose.failed", reason=result.describe_failure(), stderr=result.stderr[-1000:])
            raise VideoCompositionError(f"ffmpeg failed: {result.describe_failure()}")

        logger.info("ffmpeg.compose.done", output_path=str(output_path))
        return VideoAsset(
            path=output_path,
            duration=audio.duration,
            width=width,
            height=height,
            seconds_per_image=per_image,
        )
