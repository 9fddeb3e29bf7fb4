"""Shared fakes for the external collaborators."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import httpx
import pytest

from fact_shorts.config import Settings
from fact_shorts.errors import ScriptGenerationError
from fact_shorts.tools.process import ProcessResult
from fact_shorts.tools.scratch import ScratchStorage


class FakeScriptGenerator:
    def __init__(self, text: str = "Ada Lovelace wrote the first published algorithm.", fail: bool = False):
        self.text = text
        self.fail = fail
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise ScriptGenerationError("model unavailable")
        return self.text


class FakeSynthesizer:
    def __init__(self, audio: bytes = b"ID3fake-mp3"):
        self.audio = audio
        self.calls: list[tuple[str, str, str]] = []

    async def synthesize(self, text: str, voice: str, fmt: str = "mp3") -> bytes:
        self.calls.append((text, voice, fmt))
        return self.audio


class FakeImageSearch:
    """Serves *urls* in pages the way the Custom Search API does (1-based start)."""

    def __init__(self, urls: Sequence[str]):
        self.urls = list(urls)
        self.calls: list[tuple[str, int, int]] = []

    async def search(self, query: str, offset: int, page_size: int) -> list[str]:
        self.calls.append((query, offset, page_size))
        return self.urls[offset - 1 : offset - 1 + page_size]


class EndlessImageSearch(FakeImageSearch):
    """Never runs out of results."""

    def __init__(self):
        super().__init__([])

    async def search(self, query: str, offset: int, page_size: int) -> list[str]:
        self.calls.append((query, offset, page_size))
        return [f"https://img.example.com/{offset + i}.jpg" for i in range(page_size)]


class FakeBlobStore:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.objects: dict[str, bytes] = {}

    def public_url(self, key: str) -> str:
        return f"https://blobs.example.com/{key}"

    async def put(self, data: bytes, key: str, content_type: str) -> str:
        if self.fail:
            raise RuntimeError("bucket is gone")
        self.objects[key] = data
        return self.public_url(key)

    async def list(self, prefix: str) -> list[str]:
        return sorted(k for k in self.objects if k.startswith(prefix))


class FakeRunner:
    """Stands in for ffprobe/ffmpeg; ffmpeg writes its output file."""

    def __init__(self, probe_output: str = "45.3\n", probe_returncode: int = 0, ffmpeg_returncode: int = 0):
        self.probe_output = probe_output
        self.probe_returncode = probe_returncode
        self.ffmpeg_returncode = ffmpeg_returncode
        self.calls: list[list[str]] = []
        self.frames_seen: list[list[str]] = []

    async def __call__(self, args: Sequence[str], timeout: float | None = None) -> ProcessResult:
        args = [str(a) for a in args]
        self.calls.append(args)
        if args[0] == "ffprobe":
            return ProcessResult(args=args, returncode=self.probe_returncode, stdout=self.probe_output)

        pattern = Path(args[args.index("-framerate") + 3])
        self.frames_seen.append(sorted(p.name for p in pattern.parent.iterdir()))
        if self.ffmpeg_returncode != 0:
            return ProcessResult(args=args, returncode=self.ffmpeg_returncode, stderr="Invalid data found")
        Path(args[-1]).write_bytes(b"fake-mp4")
        return ProcessResult(args=args, returncode=0)

    @property
    def ffmpeg_calls(self) -> list[list[str]]:
        return [c for c in self.calls if c[0] == "ffmpeg"]


def image_transport(failing: set[str] | None = None, broken: set[str] | None = None, requested: list[str] | None = None):
    """Serve JPEG-ish bytes for any URL; *failing* get 404, *broken* raise."""
    failing = failing or set()
    broken = broken or set()

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if requested is not None:
            requested.append(url)
        if url in broken:
            raise httpx.ConnectError("connection reset", request=request)
        if url in failing:
            return httpx.Response(404)
        return httpx.Response(200, content=b"\xff\xd8\xff" + url.encode())

    return httpx.MockTransport(handler)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        work_dir=str(tmp_path / "work"),
        ffmpeg_path="ffmpeg",
        ffprobe_path="ffprobe",
        voice_id="voice-1",
    )


@pytest.fixture
def scratch(settings: Settings) -> ScratchStorage:
    return ScratchStorage(settings.work_path)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()
