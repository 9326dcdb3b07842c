# ui/formatting.py
from datetime import datetime, timezone
from typing import Optional

from core.models import TrackEntry

NOW_PLAYING = "Now Playing"


def format_relative(played_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    if played_at is None:
        return "—"
    now = now or datetime.now(timezone.utc)
    s = max(0, int((now - played_at).total_seconds()))
    if s < 60:
        return f"{s}s ago"
    if s < 3600:
        return f"{s // 60}m ago"
    if s < 86400:
        return f"{s // 3600}h ago"
    return f"{s // 86400}d ago"


def when_text(entry: TrackEntry, now: Optional[datetime] = None) -> str:
    return NOW_PLAYING if entry.is_live_now else format_relative(entry.played_at, now)
