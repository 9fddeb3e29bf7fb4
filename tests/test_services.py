from types import SimpleNamespace

import httpx
import pytest

from fact_shorts.errors import ImageSearchError, ScriptGenerationError, SpeechSynthesisError, UploadError
from fact_shorts.tools.elevenlabs import ElevenLabsSynthesizer
from fact_shorts.tools.openai_script import OpenAIScriptGenerator
from fact_shorts.tools.search import GoogleImageSearch
from fact_shorts.tools.supabase_storage import SupabaseBlobStore


# ---------------------------------------------------------------------------
# Google image search
# ---------------------------------------------------------------------------


async def test_google_search_params_and_links(settings):
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={"items": [{"link": "https://a/1.jpg"}, {"title": "no link"}, {"link": "https://a/2.jpg"}]})

    search = GoogleImageSearch(httpx.AsyncClient(transport=httpx.MockTransport(handler)), settings=settings)

    links = await search.search("Ada Lovelace", 11, 10)

    assert links == ["https://a/1.jpg", "https://a/2.jpg"]
    assert seen["q"] == "Ada Lovelace"
    assert seen["searchType"] == "image"
    assert seen["start"] == "11"
    assert seen["num"] == "10"


async def test_google_search_without_items_is_empty(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    search = GoogleImageSearch(httpx.AsyncClient(transport=transport), settings=settings)

    assert await search.search("Ada", 1, 10) == []


async def test_google_search_error(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(403, json={"error": "quota"}))
    search = GoogleImageSearch(httpx.AsyncClient(transport=transport), settings=settings)

    with pytest.raises(ImageSearchError):
        await search.search("Ada", 1, 10)


# ---------------------------------------------------------------------------
# OpenAI script generation
# ---------------------------------------------------------------------------


class _FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai_client(content):
    completions = _FakeCompletions(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


async def test_script_generation(settings):
    client, completions = _openai_client("  Ada wrote the first algorithm.  ")

    text = await OpenAIScriptGenerator(client=client, settings=settings).generate("prompt")

    assert text == "Ada wrote the first algorithm."
    assert completions.kwargs["messages"] == [{"role": "user", "content": "prompt"}]
    assert completions.kwargs["model"] == settings.script_model


async def test_empty_script_is_an_error(settings):
    client, _ = _openai_client("")

    with pytest.raises(ScriptGenerationError):
        await OpenAIScriptGenerator(client=client, settings=settings).generate("prompt")


# ---------------------------------------------------------------------------
# ElevenLabs synthesis
# ---------------------------------------------------------------------------


class _FakeTTS:
    def __init__(self, chunks):
        self.chunks = chunks
        self.kwargs = None

    def convert(self, **kwargs):
        self.kwargs = kwargs

        async def stream():
            for chunk in self.chunks:
                yield chunk

        return stream()


async def test_synthesis_joins_chunks(settings):
    tts = _FakeTTS([b"ab", b"cd"])
    synth = ElevenLabsSynthesizer(client=SimpleNamespace(text_to_speech=tts), settings=settings)

    audio = await synth.synthesize("hello", "voice-1")

    assert audio == b"abcd"
    assert tts.kwargs["voice_id"] == "voice-1"
    assert tts.kwargs["output_format"].startswith("mp3")


async def test_empty_audio_is_an_error(settings):
    synth = ElevenLabsSynthesizer(client=SimpleNamespace(text_to_speech=_FakeTTS([])), settings=settings)

    with pytest.raises(SpeechSynthesisError):
        await synth.synthesize("hello", "voice-1")


# ---------------------------------------------------------------------------
# Supabase storage
# ---------------------------------------------------------------------------


class _FakeBucket:
    def __init__(self, fail=False, names=None):
        self.fail = fail
        self.uploads = []
        self.names = names if names is not None else [".emptyFolderPlaceholder", "video_1.mp4", "video_2.mp4"]
        self.list_calls = []

    def upload(self, path, data, file_options=None):
        if self.fail:
            raise RuntimeError("403 Forbidden")
        self.uploads.append((path, data, file_options))

    def list(self, path=None, options=None):
        options = options or {}
        self.list_calls.append(options)
        offset, limit = options.get("offset", 0), options.get("limit", 100)
        return [{"name": name} for name in self.names[offset : offset + limit]]


def _supabase(bucket):
    storage = SimpleNamespace(from_=lambda name: bucket)
    return SimpleNamespace(storage=storage)


async def test_supabase_put_returns_public_url(tmp_path):
    from fact_shorts.config import Settings

    settings = Settings(_env_file=None, work_dir=str(tmp_path), supabase_url="https://proj.supabase.co")
    bucket = _FakeBucket()
    store = SupabaseBlobStore(client=_supabase(bucket), settings=settings)

    url = await store.put(b"mp4", "videos/video_1.mp4", "video/mp4")

    assert url == "https://proj.supabase.co/storage/v1/object/public/videos/videos/video_1.mp4"
    assert bucket.uploads[0][0] == "videos/video_1.mp4"
    assert bucket.uploads[0][2]["content-type"] == "video/mp4"


async def test_supabase_put_failure(settings):
    store = SupabaseBlobStore(client=_supabase(_FakeBucket(fail=True)), settings=settings)

    with pytest.raises(UploadError):
        await store.put(b"mp4", "videos/video_1.mp4", "video/mp4")


async def test_supabase_list_skips_placeholder(settings):
    store = SupabaseBlobStore(client=_supabase(_FakeBucket()), settings=settings)

    assert await store.list("videos/") == ["videos/video_1.mp4", "videos/video_2.mp4"]


async def test_supabase_list_pages_past_first_hundred(settings):
    bucket = _FakeBucket(names=[f"video_{i:03d}.mp4" for i in range(250)])
    store = SupabaseBlobStore(client=_supabase(bucket), settings=settings)

    keys = await store.list("videos/")

    assert len(keys) == 250
    assert keys[-1] == "videos/video_249.mp4"
    assert [call["offset"] for call in bucket.list_calls] == [0, 100, 200]
