"""Game image lookup against the catalog XML API.

Resolvers implement a narrow interface: resolve(objectid) -> image URL.
A lookup never raises; any failure yields DEFAULT_IMAGE_URL.

Forbidden: DB writes, reconciliation logic.
"""

from __future__ import annotations

import asyncio
import logging
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Iterable

import httpx

from boardvote.core.identity import DEFAULT_CATALOG_HOST, DEFAULT_IMAGE_URL

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_CONCURRENCY = 4


class ImageResolver(ABC):
    """Abstract base class for image resolvers."""

    @abstractmethod
    async def resolve(self, objectid: str) -> str:
        """Resolve the image URL of one game.

        Args:
            objectid: Catalog object id.

        Returns:
            Image URL, or DEFAULT_IMAGE_URL when none can be found.
        """
        pass

    async def resolve_many(self, objectids: Iterable[str]) -> dict[str, str]:
        """Resolve several games, one at a time.

        Returns:
            Mapping objectid -> image URL for every requested id.
        """
        return {objectid: await self.resolve(objectid) for objectid in objectids}


class StaticImageResolver(ImageResolver):
    """Resolver that never touches the network.

    Used for offline seeding and tests.
    """

    def __init__(self, image_url: str = DEFAULT_IMAGE_URL, overrides: dict[str, str] | None = None):
        self.image_url = image_url
        self.overrides = dict(overrides or {})

    async def resolve(self, objectid: str) -> str:
        return self.overrides.get(objectid, self.image_url)


class CatalogImageResolver(ImageResolver):
    """Resolver backed by the catalog's XML "thing" endpoint.

    GET https://<host>/xmlapi2/thing?id=<objectid> and read <image>.
    """

    def __init__(
        self,
        host: str = DEFAULT_CATALOG_HOST,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        """Initialize resolver.

        Args:
            host: Catalog host, without scheme.
            client: Optional shared client. When omitted, a client is
                created per resolve_many call (or per single lookup).
            timeout: Request timeout in seconds.
            concurrency: Maximum lookups in flight.
        """
        self.base_url = f"https://{host}"
        self.client = client
        self.timeout = timeout
        self.concurrency = max(1, concurrency)

    async def resolve(self, objectid: str) -> str:
        if self.client is not None:
            return await self._lookup(self.client, objectid)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._lookup(client, objectid)

    async def resolve_many(self, objectids: Iterable[str]) -> dict[str, str]:
        """Resolve several games concurrently, bounded by the semaphore."""
        ids = list(dict.fromkeys(objectids))
        if not ids:
            return {}

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(client: httpx.AsyncClient, objectid: str) -> str:
            async with semaphore:
                return await self._lookup(client, objectid)

        if self.client is not None:
            urls = await asyncio.gather(*(bounded(self.client, i) for i in ids))
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                urls = await asyncio.gather(*(bounded(client, i) for i in ids))

        return dict(zip(ids, urls))

    async def _lookup(self, client: httpx.AsyncClient, objectid: str) -> str:
        try:
            response = await client.get(
                f"{self.base_url}/xmlapi2/thing",
                params={"id": objectid},
            )
            response.raise_for_status()
            return parse_thing_image(response.text) or DEFAULT_IMAGE_URL
        except Exception as e:
            # Includes httpx.InvalidURL, which is not an httpx.HTTPError
            logger.warning(f"Image lookup failed for {objectid}: {e}")
            return DEFAULT_IMAGE_URL


def parse_thing_image(xml_text: str) -> str | None:
    """Extract the first <image> URL from a thing response.

    Raises:
        xml.etree.ElementTree.ParseError: If the payload is not XML.
    """
    root = ET.fromstring(xml_text)
    image = root.find(".//image")
    if image is None or not (image.text or "").strip():
        return None
    return image.text.strip()
