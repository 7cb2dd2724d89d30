"""Resolve per-slide image descriptions into :class:`ImageRef` objects."""

from __future__ import annotations

import asyncio
import logging
import re
import zlib
from abc import ABC, abstractmethod
from urllib.parse import quote
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from .errors import ImageResolutionFailure
from .models import Deck, ImageRef

LOGGER = logging.getLogger(__name__)

FALLBACK_QUERY = "business presentation"
PLACEHOLDER_URL = "https://picsum.photos/800/600?random={seed}"
MAX_QUERY_TERMS = 4

_PUNCTUATION = re.compile(r"[^\w\s]")


def compact_query(description: Optional[str]) -> str:
    """Reduce a free-text description to a short keyword query."""

    text = _PUNCTUATION.sub(" ", (description or "").lower())
    words = [word for word in text.split() if len(word) > 2]
    return " ".join(words[:MAX_QUERY_TERMS]) or FALLBACK_QUERY


def placeholder_image(description: Optional[str]) -> ImageRef:
    """Neutral stock image whose seed is stable for the same description."""

    query = compact_query(description)
    seed = zlib.crc32(query.encode("utf-8")) % 1000
    return ImageRef(
        url=PLACEHOLDER_URL.format(seed=seed),
        alt_text=description or query,
        source="placeholder",
    )


# ----------------------------------------------------------------------
# Providers
# ----------------------------------------------------------------------

class ImageProvider(ABC):
    """Base class for a single photo search backend."""

    name = "provider"
    requires_key = True

    def __init__(self, api_key: Optional[str] = None) -> None:
        self.api_key = api_key

    @property
    def enabled(self) -> bool:
        return bool(self.api_key) or not self.requires_key

    @abstractmethod
    async def search(self, client: httpx.AsyncClient, query: str) -> Optional[str]:
        """Return an image URL for ``query`` or raise on failure."""

    def _empty(self, query: str) -> ImageResolutionFailure:
        return ImageResolutionFailure(f"No results for '{query}'", provider=self.name)


class UnsplashSourceProvider(ImageProvider):
    """Keyless Unsplash source endpoint, checked with a HEAD request."""

    name = "unsplash"
    requires_key = False
    base_url = "https://source.unsplash.com/800x600/"

    async def search(self, client: httpx.AsyncClient, query: str) -> Optional[str]:
        url = f"{self.base_url}?{quote(query)}"
        response = await client.head(url)
        response.raise_for_status()
        return url


class PexelsProvider(ImageProvider):
    name = "pexels"
    base_url = "https://api.pexels.com/v1/search"

    async def search(self, client: httpx.AsyncClient, query: str) -> Optional[str]:
        response = await client.get(
            self.base_url,
            params={"query": query, "per_page": 1},
            headers={"Authorization": self.api_key or ""},
        )
        response.raise_for_status()
        photos = response.json().get("photos") or []
        if not photos:
            raise self._empty(query)
        return photos[0]["src"]["large"]


class PixabayProvider(ImageProvider):
    name = "pixabay"
    base_url = "https://pixabay.com/api/"

    async def search(self, client: httpx.AsyncClient, query: str) -> Optional[str]:
        response = await client.get(
            self.base_url,
            params={
                "key": self.api_key or "",
                "q": query,
                "image_type": "photo",
                "per_page": 3,
                "safesearch": "true",
            },
        )
        response.raise_for_status()
        hits = response.json().get("hits") or []
        if not hits:
            raise self._empty(query)
        return hits[0]["webformatURL"]


def default_providers(
    *, pexels_api_key: Optional[str] = None, pixabay_api_key: Optional[str] = None
) -> List[ImageProvider]:
    return [
        UnsplashSourceProvider(),
        PexelsProvider(pexels_api_key),
        PixabayProvider(pixabay_api_key),
    ]


async def first_successful(
    providers: Iterable[ImageProvider], client: httpx.AsyncClient, query: str
) -> Optional[Tuple[str, str]]:
    """Try ``providers`` in order and return ``(provider_name, url)`` or ``None``."""

    for provider in providers:
        if not provider.enabled:
            LOGGER.debug("Skipping %s: no credentials configured", provider.name)
            continue
        try:
            url = await provider.search(client, query)
        except Exception as exc:
            LOGGER.warning("Image provider %s failed for '%s': %s", provider.name, query, exc)
            continue
        if url:
            return provider.name, url
    return None


# ----------------------------------------------------------------------
# Resolver
# ----------------------------------------------------------------------

class ImageResolver:
    """Fetch images for every slide of a deck concurrently.

    ``resolve`` is total: when every provider fails the result is a
    placeholder image rather than ``None``.
    """

    def __init__(
        self,
        providers: Optional[Sequence[ImageProvider]] = None,
        *,
        timeout: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.providers = list(providers) if providers is not None else default_providers()
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings) -> "ImageResolver":
        return cls(
            default_providers(
                pexels_api_key=settings.pexels_api_key,
                pixabay_api_key=settings.pixabay_api_key,
            ),
            timeout=settings.image_timeout,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def open(self) -> None:
        if self._client is None:
            self._client = self._build_client()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ImageResolver":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def resolve(self, description: Optional[str]) -> ImageRef:
        query = compact_query(description)
        if self._client is None:
            async with self._build_client() as client:
                return await self._resolve_with(client, description, query)
        return await self._resolve_with(self._client, description, query)

    async def resolve_deck(self, deck: Deck) -> Deck:
        """Return a new deck once every requested image has settled."""

        requests = deck.image_requests()
        if not requests:
            return deck
        LOGGER.info("Resolving images for %d slide(s)", len(requests))
        results = await asyncio.gather(
            *(self.resolve(slide.image_query) for slide in requests)
        )
        images: Dict[int, Optional[ImageRef]] = {
            slide.index: image for slide, image in zip(requests, results)
        }
        return deck.with_images(images)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self.transport,
        )

    async def _resolve_with(
        self, client: httpx.AsyncClient, description: Optional[str], query: str
    ) -> ImageRef:
        chain_timeout = self.timeout * max(1, len(self.providers))
        try:
            found = await asyncio.wait_for(
                first_successful(self.providers, client, query), timeout=chain_timeout
            )
        except asyncio.TimeoutError:
            LOGGER.warning("Image search for '%s' timed out after %.1fs", query, chain_timeout)
            found = None

        if found is None:
            return placeholder_image(description)
        provider_name, url = found
        return ImageRef(url=url, alt_text=description or query, source=provider_name)
