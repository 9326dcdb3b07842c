# core/config.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values

from .debug import debug_log
from .errors import ConfigurationError

DEFAULT_PROPERTIES = Path(__file__).resolve().parents[1] / "lastfm.properties"

REFRESH_CHOICES = (15, 20, 30, 60, 120)
DEFAULT_REFRESH_SECONDS = 20

PERIODS = ("overall", "7day", "1month", "3month", "6month", "12month")
DEFAULT_PERIOD = "7day"

DEFAULT_PAGE_SIZE = 50


@dataclass(frozen=True)
class Settings:
    api_key: str
    username: str
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS
    period: str = DEFAULT_PERIOD
    page_size: int = DEFAULT_PAGE_SIZE


def read_properties(path: Union[str, Path]) -> Dict[str, str]:
    """
    Reads `key=value` lines via python-dotenv. '#' starts a comment;
    keys without a value are dropped.
    """
    values = dotenv_values(dotenv_path=path, encoding="utf-8")
    return {key: value.strip() for key, value in values.items() if value is not None}


def parse_refresh_seconds(value: Optional[str]) -> int:
    if value is None or not str(value).strip():
        return DEFAULT_REFRESH_SECONDS
    try:
        seconds = int(str(value).strip())
    except ValueError:
        debug_log(f"Ignoring non-numeric refresh interval {value!r}")
        return DEFAULT_REFRESH_SECONDS
    if seconds not in REFRESH_CHOICES:
        debug_log(f"Ignoring refresh interval {seconds}s, allowed: {REFRESH_CHOICES}")
        return DEFAULT_REFRESH_SECONDS
    return seconds


def parse_period(value: Optional[str]) -> str:
    period = (value or "").strip()
    if period not in PERIODS:
        if period:
            debug_log(f"Ignoring unknown period {period!r}")
        return DEFAULT_PERIOD
    return period


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    props: Dict[str, str] = {}
    props_path = Path(path) if path else DEFAULT_PROPERTIES
    if props_path.exists():
        try:
            props = read_properties(props_path)
        except OSError as e:
            debug_log(f"Could not read {props_path}: {e}")

    api_key = (os.getenv("LASTFM_API_KEY") or props.get("api_key") or "").strip()
    username = (os.getenv("LASTFM_USERNAME") or props.get("username") or "").strip()

    missing = [name for name, value in (("api_key", api_key), ("username", username)) if not value]
    if missing:
        raise ConfigurationError(
            f"Missing/blank property: {', '.join(missing)} "
            f"(set LASTFM_API_KEY / LASTFM_USERNAME or fill {props_path.name})"
        )

    refresh = os.getenv("SCROBBLEDASH_REFRESH_SECONDS") or props.get("refresh_seconds")

    return Settings(
        api_key=api_key,
        username=username,
        refresh_seconds=parse_refresh_seconds(refresh),
        period=parse_period(props.get("period")),
    )
