"""Application configuration loaded from environment variables."""

from __future__ import annotations

import shutil
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Script generation
    openai_api_key: str = ""
    script_model: str = "gpt-4o-mini"

    # Speech synthesis
    elevenlabs_api_key: str = ""
    voice_id: str = "JBFqnCBsd6RMkjVDRZzb"
    tts_model: str = "eleven_multilingual_v2"

    # Image search (Google Custom Search JSON API)
    google_api_key: str = ""
    search_engine_id: str = ""

    # Blob storage
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_storage_bucket: str = "videos"

    # Pipeline Settings
    image_count: int = 10
    search_page_size: int = 10
    search_offset_ceiling: int = 100
    download_concurrency: int = 4
    fallback_duration: float = Field(default=30.0, gt=0)
    max_image_bytes: int = Field(default=20 * 1024 * 1024, gt=0)

    # External binaries (empty = look up on PATH)
    ffmpeg_path: str = ""
    ffprobe_path: str = ""

    # Timeouts (seconds)
    http_timeout: float = 30.0
    probe_timeout: float = 30.0
    encode_timeout: float = 600.0

    # Output
    work_dir: str = "./output"

    # Video Output
    video_width: int = 1280
    video_height: int = 720
    audio_bitrate: str = "192k"

    # API
    allowed_origins: str = ""
    log_level: str = "INFO"

    @property
    def work_path(self) -> Path:
        return Path(self.work_dir)

    def resolve_ffmpeg(self) -> str:
        return resolve_binary(self.ffmpeg_path, "ffmpeg")

    def resolve_ffprobe(self) -> str:
        return resolve_binary(self.ffprobe_path, "ffprobe")


def resolve_binary(configured: str, name: str) -> str:
    """Return the configured binary path, else the one found on PATH.

    Falls back to the bare *name* so a missing binary surfaces as a
    process execution error at call time rather than at import time.
    """
    if configured:
        return configured
    return shutil.which(name) or name


settings = Settings()
