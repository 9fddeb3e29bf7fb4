"""FastAPI dependency injection — pipeline and blob store handles."""

from __future__ import annotations

import httpx
from fastapi import Request

from fact_shorts.config import Settings
from fact_shorts.pipeline import VideoPipeline
from fact_shorts.services import BlobStore
from fact_shorts.tools.elevenlabs import ElevenLabsSynthesizer
from fact_shorts.tools.openai_script import OpenAIScriptGenerator
from fact_shorts.tools.search import GoogleImageSearch
from fact_shorts.tools.supabase_storage import SupabaseBlobStore


def build_pipeline(settings: Settings, http_client: httpx.AsyncClient) -> tuple[VideoPipeline, BlobStore]:
    """Wire the production collaborators into a pipeline."""
    blob_store = SupabaseBlobStore(settings=settings)
    pipeline = VideoPipeline(
        script_generator=OpenAIScriptGenerator(settings=settings),
        synthesizer=ElevenLabsSynthesizer(settings=settings),
        image_search=GoogleImageSearch(http_client, settings=settings),
        blob_store=blob_store,
        http_client=http_client,
        settings=settings,
    )
    return pipeline, blob_store


def get_pipeline(request: Request) -> VideoPipeline:
    return request.app.state.pipeline


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store
