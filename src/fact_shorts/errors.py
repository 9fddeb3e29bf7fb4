"""Pipeline error kinds.

Every fatal failure carries the stage that raised it so the HTTP surface
can report a single human-readable message. Degraded (duration probe) and
skippable (single image download) failures never become exceptions.
"""

from __future__ import annotations


class PipelineError(Exception):
    stage: str = "pipeline"

    def __init__(self, message: str, *, stage: str | None = None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage


class ScriptGenerationError(PipelineError):
    stage = "scripting"


class SpeechSynthesisError(PipelineError):
    stage = "synthesizing"


class ImageSearchError(PipelineError):
    stage = "acquiring"


class NoImagesFoundError(PipelineError):
    """Raised when a full page scan produced zero usable images."""

    stage = "acquiring"


class StagingError(PipelineError):
    stage = "staging"


class VideoCompositionError(PipelineError):
    stage = "composing"


class UploadError(PipelineError):
    stage = "publishing"
