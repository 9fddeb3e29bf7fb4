"""Pipeline orchestrator — subject in, published video URL out.

Stages run strictly in order; the first failure skips everything that is
left except cleanup, which always runs and never raises.

    IDLE -> SCRIPTING -> SYNTHESIZING -> ACQUIRING -> STAGING -> PROBING
         -> COMPOSING -> PUBLISHING -> CLEANUP -> DONE   (or FAILED)
"""

from __future__ import annotations

import time
import uuid
from enum import Enum
from pathlib import Path
from typing import Callable

import httpx
import structlog

from fact_shorts.config import Settings, settings as default_settings
from fact_shorts.errors import PipelineError
from fact_shorts.models.media import AudioAsset, ImageAsset
from fact_shorts.models.output import PipelineResult
from fact_shorts.services import BlobStore, ImageSearch, ScriptGenerator, SpeechSynthesizer
from fact_shorts.tools.ffmpeg import VideoComposer
from fact_shorts.tools.ffprobe import AudioDurationProber
from fact_shorts.tools.image_acquirer import ImageAcquirer
from fact_shorts.tools.openai_script import build_script_prompt
from fact_shorts.tools.scratch import ScratchStorage
from fact_shorts.tools.staging import StagingArea

logger = structlog.get_logger()

VIDEO_KEY_PREFIX = "videos/"


class PipelineStage(str, Enum):
    IDLE = "idle"
    SCRIPTING = "scripting"
    SYNTHESIZING = "synthesizing"
    ACQUIRING = "acquiring"
    STAGING = "staging"
    PROBING = "probing"
    COMPOSING = "composing"
    PUBLISHING = "publishing"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


class VideoPipeline:
    """One single-shot run per ``run()`` call.

    All external collaborators are injected; the probe and encode steps
    default to the real ffprobe/ffmpeg wrappers.
    """

    def __init__(
        self,
        script_generator: ScriptGenerator,
        synthesizer: SpeechSynthesizer,
        image_search: ImageSearch,
        blob_store: BlobStore,
        http_client: httpx.AsyncClient,
        settings: Settings | None = None,
        scratch: ScratchStorage | None = None,
        prober: AudioDurationProber | None = None,
        composer: VideoComposer | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._settings = settings or default_settings
        self._script_generator = script_generator
        self._synthesizer = synthesizer
        self._image_search = image_search
        self._blob_store = blob_store
        self._http_client = http_client
        self._scratch = scratch or ScratchStorage(self._settings.work_path)
        self._prober = prober or AudioDurationProber(self._settings)
        self._composer = composer or VideoComposer(self._settings, clock=clock, scratch=self._scratch)
        self._clock = clock
        self.stage = PipelineStage.IDLE

    def _enter(self, stage: PipelineStage, run_id: str) -> None:
        self.stage = stage
        logger.info("pipeline.stage", run_id=run_id, stage=stage.value)

    async def run(self, subject: str, count: int | None = None, run_id: str | None = None) -> PipelineResult:
        subject = subject.strip()
        if not subject:
            raise ValueError("subject must not be empty")

        run_id = run_id or uuid.uuid4().hex
        images_dir = self._scratch.path("images", run_id)
        staging = StagingArea(self._scratch, self._scratch.path("staging", run_id))
        images: list[ImageAsset] = []

        self.stage = PipelineStage.IDLE
        logger.info("pipeline.started", run_id=run_id, subject=subject)

        try:
            self._enter(PipelineStage.SCRIPTING, run_id)
            script = await self._script_generator.generate(build_script_prompt(subject))
            logger.info("pipeline.script", run_id=run_id, script=script)

            self._enter(PipelineStage.SYNTHESIZING, run_id)
            audio_bytes = await self._synthesizer.synthesize(script, self._settings.voice_id, fmt="mp3")
            audio_path = self._scratch.write_bytes(
                self._scratch.path("audio", f"audio_{int(self._clock() * 1000)}.mp3"), audio_bytes
            )

            self._enter(PipelineStage.ACQUIRING, run_id)
            acquirer = ImageAcquirer(
                self._image_search,
                self._http_client,
                self._scratch,
                images_dir,
                settings=self._settings,
                clock=self._clock,
            )
            images = await acquirer.acquire(subject, count)

            self._enter(PipelineStage.STAGING, run_id)
            frames = staging.stage(images)

            self._enter(PipelineStage.PROBING, run_id)
            duration = await self._prober.probe(audio_path)
            audio = AudioAsset(path=audio_path, duration=duration)

            self._enter(PipelineStage.COMPOSING, run_id)
            video = await self._composer.compose(
                audio, frames, staging.input_pattern, self._scratch.path("videos")
            )

            self._enter(PipelineStage.PUBLISHING, run_id)
            video_url = await self._blob_store.put(
                self._scratch.read_bytes(video.path), f"{VIDEO_KEY_PREFIX}{video.path.name}", "video/mp4"
            )
        except PipelineError as exc:
            failed_at = self.stage
            self.stage = PipelineStage.FAILED
            logger.error("pipeline.failed", run_id=run_id, stage=failed_at.value, error=exc.message)
            raise
        except Exception as exc:
            failed_at = self.stage
            self.stage = PipelineStage.FAILED
            logger.exception("pipeline.failed", run_id=run_id, stage=failed_at.value)
            raise PipelineError(str(exc) or type(exc).__name__, stage=failed_at.value) from exc
        finally:
            if self.stage is not PipelineStage.FAILED:
                self._enter(PipelineStage.CLEANUP, run_id)
            self._cleanup(run_id, images, images_dir, staging)

        self._enter(PipelineStage.DONE, run_id)
        logger.info("pipeline.completed", run_id=run_id, video_url=video_url)
        return PipelineResult(
            run_id=run_id,
            subject=subject,
            script=script,
            video_url=video_url,
            video=video,
            image_count=len(images),
        )

    def _cleanup(self, run_id: str, images: list[ImageAsset], images_dir: Path, staging: StagingArea) -> None:
        """Best effort: remove downloaded images and the staging directory."""
        logger.info("pipeline.cleanup.start", run_id=run_id, images=len(images))
        for image in images:
            try:
                self._scratch.remove(image.path)
            except OSError:
                logger.warning("pipeline.cleanup.image_failed", run_id=run_id, path=str(image.path), exc_info=True)
        try:
            self._scratch.remove_dir(images_dir)
        except OSError:
            logger.warning("pipeline.cleanup.dir_failed", run_id=run_id, path=str(images_dir), exc_info=True)
        try:
            staging.dispose()
        except OSError:
            logger.warning("pipeline.cleanup.dir_failed", run_id=run_id, path=str(staging.directory), exc_info=True)
        logger.info("pipeline.cleanup.done", run_id=run_id)
