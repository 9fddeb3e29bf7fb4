"""Supabase Storage blob store — publish videos and list published ones."""

from __future__ import annotations

import asyncio

import structlog
from supabase import Client, create_client

from fact_shorts.config import Settings, settings as default_settings
from fact_shorts.errors import UploadError

logger = structlog.get_logger()

_PLACEHOLDER = ".emptyFolderPlaceholder"
_LIST_PAGE_SIZE = 100


class SupabaseBlobStore:
    """Sync Supabase SDK calls run in a thread pool to keep the event loop free."""

    def __init__(self, client: Client | None = None, settings: Settings | None = None):
        self._settings = settings or default_settings
        self._client = client
        self.bucket = self._settings.supabase_storage_bucket

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = create_client(
                self._settings.supabase_url, self._settings.supabase_service_role_key
            )
        return self._client

    def public_url(self, key: str) -> str:
        return f"{self._settings.supabase_url}/storage/v1/object/public/{self.bucket}/{key}"

    def _put_sync(self, data: bytes, key: str, content_type: str) -> str:
        self._get_client().storage.from_(self.bucket).upload(
            key,
            data,
            file_options={"content-type": content_type, "upsert": "true"},
        )
        return self.public_url(key)

    async def put(self, data: bytes, key: str, content_type: str) -> str:
        try:
            url = await asyncio.to_thread(self._put_sync, data, key, content_type)
        except Exception as exc:
            raise UploadError(f"Upload of {key} failed: {exc}") from exc
        logger.info("supabase.upload.success", key=key, bytes=len(data))
        return url

    def _list_sync(self, prefix: str) -> list[str]:
        folder = prefix.rstrip("/")
        bucket = self._get_client().storage.from_(self.bucket)
        base = f"{folder}/" if folder else ""
        keys: list[str] = []
        offset = 0
        while True:
            entries = bucket.list(
                folder, {"limit": _LIST_PAGE_SIZE, "offset": offset, "sortBy": {"column": "name", "order": "asc"}}
            )
            keys.extend(
                f"{base}{entry['name']}" for entry in entries if entry.get("name") and entry["name"] != _PLACEHOLDER
            )
            if len(entries) < _LIST_PAGE_SIZE:
                return keys
            offset += _LIST_PAGE_SIZE

    async def list(self, prefix: str) -> list[str]:
        keys = await asyncio.to_thread(self._list_sync, prefix)
        logger.info("supabase.list.done", prefix=prefix, count=len(keys))
        return keys
