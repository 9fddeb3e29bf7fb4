"""Google Custom Search image lookup — async helper client."""

from __future__ import annotations

import httpx
import structlog

from fact_shorts.config import Settings, settings as default_settings
from fact_shorts.errors import ImageSearchError

logger = structlog.get_logger()

_CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


class GoogleImageSearch:
    """One page of image links per call (``searchType=image``)."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None):
        self._client = client
        self._settings = settings or default_settings

    async def search(self, query: str, offset: int, page_size: int) -> list[str]:
        params = {
            "q": query,
            "searchType": "image",
            "key": self._settings.google_api_key,
            "cx": self._settings.search_engine_id,
            "num": page_size,
            "start": offset,
        }
        try:
            resp = await self._client.get(_CUSTOM_SEARCH_URL, params=params)
            resp.raise_for_status()
            items = resp.json().get("items") or []
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("image_search.failed", query=query, offset=offset, error=str(exc))
            raise ImageSearchError(f"Image search failed for {query!r}: {exc}") from exc

        links = [item["link"] for item in items if item.get("link")]
        logger.info("image_search.page", query=query, offset=offset, results=len(links))
        return links
