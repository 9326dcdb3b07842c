import threading
import time

from core.config import Settings
from core.dashboard import DashboardCore
from core.errors import ConfigurationError
from core.models import Series
from tests.support import fakes


def _core(fake, **overrides):
    settings = Settings(api_key="k", username="u", **overrides)
    return DashboardCore(settings, client=fake)


def _wait_idle(core):
    # Each series runs on one worker, so a no-op queued behind the fetch finishes after it.
    for controller in (core.tracks, core.artists):
        controller._executor.submit(lambda: None).result(timeout=5)


def _wait_enriched(core, timeout=5.0):
    deadline = time.monotonic() + timeout
    while core.pool.in_flight() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert core.pool.in_flight() == set()


def test_disabled_without_settings_reports_once():
    core = DashboardCore(None, config_error=ConfigurationError("Missing/blank property: api_key"))
    statuses = []
    core.add_status_listener(statuses.append)

    core.start()

    assert statuses == ["Config error: Missing/blank property: api_key"]
    assert core.refresh_all() is False
    assert core.load_more() is False
    assert not core.scheduler.running


def test_from_config_without_credentials_is_disabled(tmp_path):
    core = DashboardCore.from_config(tmp_path / "missing.properties")
    assert not core.enabled
    assert isinstance(core.config_error, ConfigurationError)


def test_refresh_all_updates_both_series_now_playing_and_artwork(fake_lastfm):
    fake_lastfm.track_pages[1] = fakes.recent_tracks_payload(
        [fakes.raw_track("Old", uts=1), fakes.raw_track("Live", live=True), fakes.raw_track("Live 2", live=True)],
        total_pages=2,
    )
    fake_lastfm.artist_pages[1] = fakes.top_artists_payload([
        fakes.raw_artist("Pictured", 40, image="https://img/pictured.png"),
        fakes.raw_artist("Faceless", 20, image=fakes.PLACEHOLDER_URL),
    ])
    fake_lastfm.fallback_images["Faceless"] = "https://img/faceless-album.png"

    core = _core(fake_lastfm, period="overall")
    snapshots, now_playing = [], []
    artwork_done = threading.Event()
    artwork = []
    core.add_snapshot_listener(snapshots.append)
    core.add_now_playing_listener(now_playing.append)

    def on_artwork(name, url):
        artwork.append((name, url))
        artwork_done.set()

    core.add_artwork_listener(on_artwork)

    assert core.refresh_all() is True
    _wait_idle(core)
    assert artwork_done.wait(5)

    assert {e.series for e in snapshots} == {Series.TRACKS, Series.ARTISTS}
    assert [e.title for e in now_playing] == ["Live"]
    assert artwork == [("Faceless", "https://img/faceless-album.png")]
    assert fake_lastfm.count("primary", "Pictured") == 0
    assert ("top_artists", "overall", 50, 1) in fake_lastfm.calls
    assert core.artwork_for("Faceless", fakes.PLACEHOLDER_URL) == "https://img/faceless-album.png"
    assert core.artwork_for("Pictured", "https://img/pictured.png") == "https://img/pictured.png"
    core.stop()


def test_refresh_all_skipped_while_a_series_is_busy(fake_lastfm):
    fake_lastfm.gate = threading.Event()
    core = _core(fake_lastfm)

    future = core.tracks.refresh()
    assert core.refresh_all() is False
    assert core.scheduler.tick() is False

    fake_lastfm.gate.set()
    future.result(timeout=5)
    assert fake_lastfm.count("recent_tracks") == 1
    assert fake_lastfm.count("top_artists") == 0
    core.stop()


def test_load_more_pages_the_track_feed(fake_lastfm):
    fake_lastfm.track_pages[1] = fakes.recent_tracks_payload(
        [fakes.raw_track(f"A{i}") for i in range(50)], page=1, total_pages=3)
    fake_lastfm.track_pages[2] = fakes.recent_tracks_payload(
        [fakes.raw_track(f"B{i}") for i in range(50)], page=2, total_pages=3)
    core = _core(fake_lastfm)

    core.tracks.refresh().result(timeout=5)
    assert core.load_more() is True
    _wait_idle(core)

    assert ("recent_tracks", 50, 2) in fake_lastfm.calls
    assert len(core.tracks.items) == 100
    assert core.tracks.state.current_page == 2
    assert fake_lastfm.count("top_artists") == 0
    assert not hasattr(core, "load_more_artists")
    core.stop()


def test_failed_fetch_surfaces_status_and_keeps_state(fake_lastfm):
    core = _core(fake_lastfm)
    statuses = []
    core.add_status_listener(statuses.append)
    fake_lastfm.fail_with = fakes.transient()

    core.tracks.refresh().result(timeout=5)

    assert core.tracks.items == ()
    assert statuses and statuses[0].startswith("Failed to load tracks")
    core.stop()


def test_set_period_refetches_artists(fake_lastfm):
    core = _core(fake_lastfm)
    assert core.set_period("12month") is True
    _wait_idle(core)
    assert ("top_artists", "12month", 50, 1) in fake_lastfm.calls
    assert core.set_period("12month") is False
    core.stop()


def test_enrichment_only_for_new_rows_on_append(fake_lastfm):
    fake_lastfm.artist_pages[1] = fakes.top_artists_payload([fakes.raw_artist("One")], page=1, total_pages=2)
    fake_lastfm.artist_pages[2] = fakes.top_artists_payload([fakes.raw_artist("Two")], page=2, total_pages=2)
    core = _core(fake_lastfm)

    core.artists.refresh().result(timeout=5)
    core.artists.load_more().result(timeout=5)
    _wait_enriched(core)

    assert fake_lastfm.count("primary", "One") == 1
    assert fake_lastfm.count("primary", "Two") == 1
    core.stop()
