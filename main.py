#main.py
import sys
import time
from typing import Optional

from core.dashboard import DashboardCore
from core.models import Series, SnapshotEvent, TrackEntry

TOP_N = 10


def print_now_playing(entry: Optional[TrackEntry]):
    if entry is None:
        print("[Now] Nothing playing")
    else:
        print(f"[Now] {entry.title} — {entry.artist}")


def print_snapshot(event: SnapshotEvent):
    if event.series == Series.TRACKS:
        print(f"[Tracks] {len(event.items)} rows (page {event.current_page}/{event.total_pages})")
        return
    print(f"[Artists] Top {min(TOP_N, len(event.items))}:")
    for rank, artist in enumerate(event.items[:TOP_N], start=1):
        print(f"  {rank:>2}. {artist.name} ({artist.play_count} plays)")


def main():
    core = DashboardCore.from_config()
    if not core.enabled:
        print(f"[Config] {core.config_error}")
        return 1

    core.add_status_listener(lambda msg: print(f"[Status] {msg}"))
    core.add_snapshot_listener(print_snapshot)
    core.add_now_playing_listener(print_now_playing)
    core.add_artwork_listener(lambda name, url: print(f"[Art] {name}: {url}"))

    print("[Last.fm] Watching scrobbles… (Ctrl+C to stop)")
    core.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        core.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
