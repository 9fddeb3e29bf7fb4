"""Pydantic models for final output."""

from pydantic import BaseModel

from fact_shorts.models.media import VideoAsset


class PipelineResult(BaseModel):
    run_id: str
    subject: str
    script: str
    video_url: str
    video: VideoAsset
    image_count: int
