"""Interfaces of the external collaborators the pipeline is wired with."""

from __future__ import annotations

from typing import Protocol


class ScriptGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str, voice: str, fmt: str = "mp3") -> bytes: ...


class ImageSearch(Protocol):
    async def search(self, query: str, offset: int, page_size: int) -> list[str]: ...


class BlobStore(Protocol):
    async def put(self, data: bytes, key: str, content_type: str) -> str: ...

    async def list(self, prefix: str) -> list[str]: ...

    def public_url(self, key: str) -> str: ...
