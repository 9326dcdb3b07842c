import pytest

from core.config import (
    DEFAULT_REFRESH_SECONDS,
    load_settings,
    parse_period,
    parse_refresh_seconds,
    read_properties,
)
from core.errors import ConfigurationError


def _props(tmp_path, text):
    path = tmp_path / "lastfm.properties"
    path.write_text(text, encoding="utf-8")
    return path


def test_reads_properties_file(tmp_path):
    path = _props(tmp_path, "# creds\napi_key = abc123\nusername=someone\nrefresh_seconds=60\nperiod=1month\n")

    settings = load_settings(path)

    assert settings.api_key == "abc123"
    assert settings.username == "someone"
    assert settings.refresh_seconds == 60
    assert settings.period == "1month"
    assert settings.page_size == 50


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = _props(tmp_path, "api_key=file-key\nusername=file-user\n")
    monkeypatch.setenv("LASTFM_API_KEY", "env-key")
    monkeypatch.setenv("SCROBBLEDASH_REFRESH_SECONDS", "120")

    settings = load_settings(path)

    assert settings.api_key == "env-key"
    assert settings.username == "file-user"
    assert settings.refresh_seconds == 120


def test_missing_credentials_raise(tmp_path):
    with pytest.raises(ConfigurationError, match="api_key, username"):
        load_settings(tmp_path / "absent.properties")


def test_blank_values_count_as_missing(tmp_path, monkeypatch):
    path = _props(tmp_path, "api_key=   \nusername=me\n")
    with pytest.raises(ConfigurationError, match="api_key"):
        load_settings(path)


@pytest.mark.parametrize("raw,expected", [
    (None, DEFAULT_REFRESH_SECONDS),
    ("", DEFAULT_REFRESH_SECONDS),
    ("abc", DEFAULT_REFRESH_SECONDS),
    ("7", DEFAULT_REFRESH_SECONDS),
    ("15", 15),
    (" 120 ", 120),
])
def test_parse_refresh_seconds(raw, expected):
    assert parse_refresh_seconds(raw) == expected


def test_parse_period_falls_back():
    assert parse_period("overall") == "overall"
    assert parse_period("fortnight") == "7day"
    assert parse_period(None) == "7day"


def test_read_properties_skips_comments_and_junk(tmp_path):
    path = _props(tmp_path, "# comment\n\nno_value_here\nkey=value=with=equals\nquoted=\"  spaced  \"\n")
    assert read_properties(path) == {"key": "value=with=equals", "quoted": "spaced"}
