import threading

import pytest

from core.errors import EnrichmentFailure
from core.image_resolver import NO_ARTWORK, ImageResolver, ResolutionCache
from core.lastfm_client import LastFmClient
from tests.support import fakes
from tests.support.fakes import FakeResponse, FakeSession


def _resolver(fake):
    return ImageResolver.for_client(fake)


def test_primary_image_is_accepted(fake_lastfm):
    fake_lastfm.primary_images["Alpha"] = "https://img/alpha.png"
    resolver = _resolver(fake_lastfm)

    assert resolver.resolve_artist_art("Alpha") == "https://img/alpha.png"
    assert fake_lastfm.count("fallback") == 0
    assert resolver.cache.get("Alpha") == "https://img/alpha.png"


def test_placeholder_triggers_top_album_fallback(fake_lastfm):
    fake_lastfm.primary_images["Beta"] = fakes.PLACEHOLDER_URL
    fake_lastfm.fallback_images["Beta"] = "https://img/beta-album.png"

    assert _resolver(fake_lastfm).resolve_artist_art("Beta") == "https://img/beta-album.png"


def test_nothing_usable_is_cached_as_none(fake_lastfm):
    fake_lastfm.fallback_images["Gamma"] = fakes.PLACEHOLDER_URL
    resolver = _resolver(fake_lastfm)

    assert resolver.resolve_artist_art("Gamma") == NO_ARTWORK
    assert "Gamma" in resolver.cache
    assert resolver.cache.get("Gamma") == NO_ARTWORK


def test_each_lookup_happens_once_per_name(fake_lastfm):
    resolver = _resolver(fake_lastfm)

    for _ in range(5):
        resolver.resolve_artist_art("Delta")

    assert fake_lastfm.count("primary", "Delta") == 1
    assert fake_lastfm.count("fallback", "Delta") == 1


def test_names_are_case_sensitive(fake_lastfm):
    resolver = _resolver(fake_lastfm)
    resolver.resolve_artist_art("abba")
    resolver.resolve_artist_art("ABBA")
    assert fake_lastfm.count("primary") == 2


def test_transient_failure_is_not_cached(fake_lastfm):
    fake_lastfm.fail_with = fakes.transient()
    resolver = _resolver(fake_lastfm)

    with pytest.raises(EnrichmentFailure) as exc:
        resolver.resolve_artist_art("Epsilon")

    assert exc.value.artist == "Epsilon"
    assert "Epsilon" not in resolver.cache

    fake_lastfm.fail_with = None
    fake_lastfm.primary_images["Epsilon"] = "https://img/e.png"
    assert resolver.resolve_artist_art("Epsilon") == "https://img/e.png"


def test_server_error_from_lastfm_is_retried_on_next_resolve():
    session = FakeSession([
        FakeResponse(status_code=503, text="Service Unavailable"),
        FakeResponse(payload={"artist": {"image": fakes.image_list("https://img/300x300/iota.png")}}),
    ])
    resolver = ImageResolver.for_client(LastFmClient("key-123", "listener", session=session))

    with pytest.raises(EnrichmentFailure):
        resolver.resolve_artist_art("Iota")
    assert "Iota" not in resolver.cache

    assert resolver.resolve_artist_art("Iota") == "https://img/300x300/iota.png"
    assert resolver.cache.get("Iota") == "https://img/300x300/iota.png"


def test_unknown_artist_from_lastfm_is_cached_as_none():
    not_found = {"error": 6, "message": "The artist you supplied could not be found"}
    session = FakeSession([
        FakeResponse(status_code=400, payload=not_found),
        FakeResponse(status_code=400, payload=not_found),
    ])
    resolver = ImageResolver.for_client(LastFmClient("key-123", "listener", session=session))

    assert resolver.resolve_artist_art("Kappa") == NO_ARTWORK
    assert resolver.cache.get("Kappa") == NO_ARTWORK
    assert len(session.requests) == 2


def test_concurrent_calls_for_same_name_share_one_lookup(fake_lastfm):
    fake_lastfm.primary_images["Zeta"] = "https://img/z.png"
    fake_lastfm.gate = threading.Event()
    resolver = _resolver(fake_lastfm)
    results = []

    threads = [threading.Thread(target=lambda: results.append(resolver.resolve_artist_art("Zeta"))) for _ in range(4)]
    for t in threads:
        t.start()
    fake_lastfm.gate.set()
    for t in threads:
        t.join(5)

    assert results == ["https://img/z.png"] * 4
    assert fake_lastfm.count("primary", "Zeta") == 1


def test_cache_is_write_once():
    cache = ResolutionCache()
    assert cache.put("Eta", "https://img/first.png")
    assert not cache.put("Eta", "https://img/second.png")
    assert cache.get("Eta") == "https://img/first.png"
    assert len(cache) == 1


def test_cache_stores_placeholder_as_none():
    cache = ResolutionCache()
    cache.put("Theta", fakes.PLACEHOLDER_URL)
    assert cache.get("Theta") == NO_ARTWORK
