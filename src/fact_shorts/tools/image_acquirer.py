"""Image acquisition — paginated search plus bounded, skip-on-failure downloads."""

from __future__ import annotations

import asyncio
import itertools
import time
from pathlib import Path
from typing import Callable

import httpx
import structlog

from fact_shorts.config import Settings, settings as default_settings
from fact_shorts.errors import NoImagesFoundError
from fact_shorts.models.media import ImageAsset
from fact_shorts.services import ImageSearch
from fact_shorts.tools.scratch import ScratchStorage

logger = structlog.get_logger()


class ImageAcquirer:
    """Collect up to *count* local images for a subject.

    Pages are scanned from offset 1 in steps of the page size until enough
    images were downloaded, a page comes back empty, or the offset ceiling
    is reached. Within a page, downloads run concurrently but never more
    than the number of images still missing, so nothing beyond *count* is
    fetched. Results keep provider order among the successful candidates.
    """

    def __init__(
        self,
        search: ImageSearch,
        client: httpx.AsyncClient,
        scratch: ScratchStorage,
        directory: Path,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._search = search
        self._client = client
        self._scratch = scratch
        self._settings = settings or default_settings
        self._clock = clock
        self._sequence = itertools.count(1)
        self._semaphore = asyncio.Semaphore(max(1, self._settings.download_concurrency))
        self.directory = directory

    async def acquire(self, subject: str, count: int | None = None) -> list[ImageAsset]:
        count = self._settings.image_count if count is None else count
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")

        page_size = self._settings.search_page_size
        ceiling = self._settings.search_offset_ceiling

        images: list[ImageAsset] = []
        seen: set[str] = set()
        offset = 1

        while len(images) < count and offset < ceiling:
            links = await self._search.search(subject, offset, page_size)
            if not links:
                logger.info("image_acquirer.exhausted", subject=subject, offset=offset)
                break

            candidates = [url for url in dict.fromkeys(links) if url not in seen]
            seen.update(candidates)
            await self._download_page(candidates, images, count)

            logger.info(
                "image_acquirer.page",
                subject=subject,
                offset=offset,
                candidates=len(candidates),
                collected=len(images),
                target=count,
            )
            offset += page_size

        if not images:
            raise NoImagesFoundError(f"No images found for {subject}")

        if len(images) < count:
            logger.warning("image_acquirer.partial", subject=subject, collected=len(images), target=count)
        else:
            logger.info("image_acquirer.done", subject=subject, collected=len(images))
        return images

    async def _download_page(self, candidates: list[str], images: list[ImageAsset], count: int) -> None:
        pending = list(candidates)
        while pending and len(images) < count:
            batch, pending = pending[: count - len(images)], pending[count - len(images):]
            results = await asyncio.gather(*(self._download(url) for url in batch), return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            images.extend(asset for asset in results if asset is not None)

    async def _download(self, url: str) -> ImageAsset | None:
        """Stream one candidate to disk; any failure is logged and yields None."""
        path = self.directory / f"image_{int(self._clock() * 1000)}_{next(self._sequence)}.jpg"
        limit = self._settings.max_image_bytes
        async with self._semaphore:
            try:
                size = await self._stream_to(url, path, limit)
            except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, OSError) as exc:
                logger.warning("image_acquirer.download_failed", url=url, error=str(exc))
                self._scratch.remove(path)
                return None

        if size is None:
            logger.warning("image_acquirer.download_oversize", url=url, limit=limit)
            self._scratch.remove(path)
            return None
        if size == 0:
            logger.warning("image_acquirer.download_empty", url=url)
            self._scratch.remove(path)
            return None

        logger.debug("image_acquirer.downloaded", url=url, path=str(path), bytes=size)
        return ImageAsset(path=path, source_url=url)

    async def _stream_to(self, url: str, path: Path, limit: int) -> int | None:
        """Write the response body to *path*; None once it exceeds *limit* bytes."""
        size = 0
        async with self._client.stream("GET", url, follow_redirects=True) as resp:
            resp.raise_for_status()
            with self._scratch.open_write(path) as fh:
                async for chunk in resp.aiter_bytes():
                    size += len(chunk)
                    if size > limit:
                        return None
                    fh.write(chunk)
        return size
