import pytest

from channelbus import ChannelMap, ChannelRegistry
from channelbus.models import registry as registry_module


@pytest.fixture
def channels():
    return ChannelMap()


@pytest.fixture
def bus(channels):
    return ChannelRegistry(backing_map=channels)


@pytest.fixture
def fresh_default(monkeypatch):
    """Give the test its own process-wide default map."""
    monkeypatch.setattr(registry_module, "_default_channels", None)
    yield
    # monkeypatch restores whatever map was there before


class Recorder:
    """Callback that remembers what it was handed."""

    def __init__(self):
        self.values = []

    def __call__(self, value):
        self.values.append(value)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_recorder():
    return Recorder
