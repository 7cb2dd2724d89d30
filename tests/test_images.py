import asyncio

import httpx
import pytest

from magicslide.images import (
    FALLBACK_QUERY,
    ImageProvider,
    ImageResolver,
    PexelsProvider,
    PixabayProvider,
    UnsplashSourceProvider,
    compact_query,
    default_providers,
    placeholder_image,
)
from magicslide.models import Deck, SlideRecord


def _resolver(handler, providers=None, timeout=2.0):
    return ImageResolver(
        providers if providers is not None else default_providers(),
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("network down", request=request)


def test_compact_query_keeps_first_meaningful_terms():
    assert compact_query("A modern office, with a diverse team collaborating!") == (
        "modern office with diverse"
    )
    assert compact_query("") == FALLBACK_QUERY
    assert compact_query(None) == FALLBACK_QUERY
    assert compact_query("a an to") == FALLBACK_QUERY


def test_placeholder_image_is_stable():
    first = placeholder_image("wind turbines at sunset")
    second = placeholder_image("wind turbines at sunset")

    assert first == second
    assert first.is_placeholder
    assert first.url.startswith("https://picsum.photos/800/600?random=")
    assert first.alt_text == "wind turbines at sunset"


def test_resolve_is_total_for_empty_description():
    resolver = _resolver(_unreachable)

    image = asyncio.run(resolver.resolve(""))

    assert image.is_placeholder
    assert image.alt_text == FALLBACK_QUERY


def test_unsplash_hit_is_returned():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "HEAD"
        assert request.url.host == "source.unsplash.com"
        return httpx.Response(200)

    image = asyncio.run(_resolver(handler).resolve("solar panels"))

    assert image.source == "unsplash"
    assert image.url == "https://source.unsplash.com/800x600/?solar%20panels"
    assert image.alt_text == "solar panels"


def test_keyed_providers_are_skipped_without_credentials():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        return httpx.Response(500)

    image = asyncio.run(_resolver(handler).resolve("city skyline"))

    assert image.is_placeholder
    assert seen == ["source.unsplash.com"]


def test_falls_through_to_next_provider():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "source.unsplash.com":
            return httpx.Response(503)
        if request.url.host == "api.pexels.com":
            assert request.headers["Authorization"] == "pexels-key"
            return httpx.Response(200, json={"photos": []})
        assert request.url.params["key"] == "pixabay-key"
        return httpx.Response(200, json={"hits": [{"webformatURL": "https://cdn.example/p.jpg"}]})

    providers = [
        UnsplashSourceProvider(),
        PexelsProvider("pexels-key"),
        PixabayProvider("pixabay-key"),
    ]

    image = asyncio.run(_resolver(handler, providers).resolve("green energy"))

    assert image.source == "pixabay"
    assert image.url == "https://cdn.example/p.jpg"


def test_pexels_large_source_is_used():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"photos": [{"src": {"large": "https://images.pexels.example/1.jpg"}}]}
        )

    image = asyncio.run(_resolver(handler, [PexelsProvider("key")]).resolve("coffee"))

    assert image.source == "pexels"
    assert image.url == "https://images.pexels.example/1.jpg"


def test_slow_provider_times_out_to_placeholder():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200)

    resolver = _resolver(handler, [UnsplashSourceProvider()], timeout=0.05)

    image = asyncio.run(resolver.resolve("mountains"))

    assert image.is_placeholder


def test_resolve_deck_when_every_provider_fails():
    slides = tuple(
        SlideRecord(index=idx, title=f"S{idx}", image_query=f"topic {idx} picture")
        for idx in range(1, 6)
    )
    deck = Deck(title="Five", slides=slides)

    async def run():
        async with _resolver(_unreachable) as resolver:
            return await resolver.resolve_deck(deck)

    resolved = asyncio.run(run())

    assert len(resolved.slides) == 5
    assert all(slide.image is not None and slide.image.is_placeholder for slide in resolved.slides)
    assert [slide.index for slide in resolved.slides] == [1, 2, 3, 4, 5]
    assert all(slide.image is None for slide in deck.slides)


def test_resolve_deck_leaves_slides_without_query_alone():
    deck = Deck(
        title="Mixed",
        slides=(
            SlideRecord(index=1, title="No image"),
            SlideRecord(index=2, title="Image", image_query="robots"),
        ),
    )

    resolved = asyncio.run(_resolver(lambda request: httpx.Response(200)).resolve_deck(deck))

    assert resolved.slides[0].image is None
    assert resolved.slides[1].image.source == "unsplash"


def test_provider_base_requires_search():
    with pytest.raises(TypeError):
        ImageProvider()

    class _KeylessProvider(ImageProvider):
        name = "keyless"
        requires_key = False

        async def search(self, client, query):
            return f"https://img.example/{query}"

    assert _KeylessProvider().enabled
