"""FastAPI route handlers for the video API."""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from fact_shorts.api.dependencies import get_blob_store, get_pipeline
from fact_shorts.api.schemas import ErrorResponse, SendRequest, SendResponse, VideoListResponse
from fact_shorts.errors import PipelineError
from fact_shorts.pipeline import VIDEO_KEY_PREFIX, VideoPipeline
from fact_shorts.services import BlobStore

logger = structlog.get_logger()

router = APIRouter(prefix="/api")

# Runs share the work directory tree; one at a time.
_run_lock = asyncio.Lock()


@router.post("/send", response_model=SendResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def send(request: SendRequest, pipeline: VideoPipeline = Depends(get_pipeline)):
    """Generate and publish a video for the given subject."""
    subject = (request.input or "").strip()
    if not subject:
        return JSONResponse(status_code=400, content=ErrorResponse(message="No input provided").model_dump(exclude_none=True))

    try:
        async with _run_lock:
            result = await pipeline.run(subject)
    except PipelineError as exc:
        logger.warning("api.send.failed", subject=subject, stage=exc.stage, error=exc.message)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(message="Error generating video", error=exc.message).model_dump(),
        )

    return SendResponse(videoUrl=result.video_url)


@router.get("/videos", response_model=VideoListResponse, responses={500: {"description": "Error fetching videos"}})
async def list_videos(blob_store: BlobStore = Depends(get_blob_store)):
    """List the public URLs of every published video."""
    try:
        keys = await blob_store.list(VIDEO_KEY_PREFIX)
    except Exception:
        logger.exception("api.videos.failed")
        return JSONResponse(status_code=500, content={"error": "Error fetching videos"})

    return VideoListResponse(videos=[blob_store.public_url(key) for key in keys])
