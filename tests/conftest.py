import os

import pytest

from unilog import testing


@pytest.fixture(autouse=True)
def isolated_facade(monkeypatch):
    """
    Each test starts from an unresolved registry, an empty logger cache and
    settings built from a clean environment.
    """
    for key in list(os.environ):
        if key.startswith("UNILOG_"):
            monkeypatch.delenv(key, raising=False)
    testing.reset()
    yield
    testing.reset()


@pytest.fixture
def sink():
    return testing.RecordSink()
