import os
import sys

import pytest

# Ensure project root is on sys.path so 'core' and 'ui' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import fakes as test_fakes


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Tests never pick up real credentials or debug switches from the shell."""
    for name in (
        "LASTFM_API_KEY",
        "LASTFM_USERNAME",
        "SCROBBLEDASH_REFRESH_SECONDS",
        "SCROBBLEDASH_ART_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def fake_lastfm():
    return test_fakes.FakeLastFm()


@pytest.fixture
def fakes():
    return test_fakes
