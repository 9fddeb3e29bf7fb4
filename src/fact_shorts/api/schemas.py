"""Request/Response schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SendRequest(BaseModel):
    input: Optional[str] = Field(default=None, description="Subject the video is about")


class SendResponse(BaseModel):
    message: str = "Video generated, check this link:"
    videoUrl: str


class ErrorResponse(BaseModel):
    message: str
    error: Optional[str] = None


class VideoListResponse(BaseModel):
    videos: list[str]
