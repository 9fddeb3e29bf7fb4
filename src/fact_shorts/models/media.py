"""Pydantic models for media assets."""

from pathlib import Path

from pydantic import BaseModel, Field, computed_field


class AudioAsset(BaseModel):
    path: Path
    duration: float = Field(gt=0)


class ImageAsset(BaseModel):
    path: Path
    source_url: str


class StagingFrame(BaseModel):
    index: int = Field(ge=1)
    path: Path

    @computed_field
    @property
    def name(self) -> str:
        return f"img{self.index:03d}.jpg"


class VideoAsset(BaseModel):
    path: Path
    duration: float
    width: int
    height: int
    seconds_per_image: float
