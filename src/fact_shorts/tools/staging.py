"""Staging area — sequentially numbered frames for the ffmpeg image2 demuxer."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import structlog

from fact_shorts.errors import StagingError
from fact_shorts.models.media import ImageAsset, StagingFrame
from fact_shorts.tools.scratch import ScratchStorage

logger = structlog.get_logger()

FRAME_PATTERN = "img%03d.jpg"


class StagingArea:
    """A directory whose whole content belongs to one composition.

    Every ``stage()`` call starts from an empty directory, so frames from a
    previous run can never leak into the next one.
    """

    def __init__(self, scratch: ScratchStorage, directory: Path):
        self._scratch = scratch
        self.directory = directory

    @property
    def input_pattern(self) -> Path:
        return self.directory / FRAME_PATTERN

    def stage(self, images: Sequence[ImageAsset]) -> list[StagingFrame]:
        """Copy *images* in order to ``img001.jpg``, ``img002.jpg``, ..."""
        try:
            self._scratch.create_dir(self.directory)
            purged = self._scratch.purge(self.directory)
        except OSError as exc:
            raise StagingError(f"Could not prepare staging directory {self.directory}: {exc}") from exc

        if purged:
            logger.info("staging.purged", directory=str(self.directory), removed=purged)

        frames: list[StagingFrame] = []
        for index, image in enumerate(images, start=1):
            frame = StagingFrame(index=index, path=self.directory / f"img{index:03d}.jpg")
            try:
                self._scratch.copy(image.path, frame.path)
            except OSError as exc:
                raise StagingError(f"Failed to stage {image.path} as {frame.name}: {exc}") from exc
            frames.append(frame)

        logger.info("staging.done", directory=str(self.directory), frames=len(frames))
        return frames

    def dispose(self) -> None:
        """Purge and remove the staging directory."""
        self._scratch.remove_dir(self.directory)
