import pytest
from pydantic import ValidationError

from channelbus import InvalidArgumentError, ReplayPolicy, StreamConfig, SubscribeOptions
from channelbus.utilities.utility_functions import config_given, to_stream_config, to_subscribe_options


def test_stream_config_defaults():
    config = StreamConfig()
    assert config.buffer_size == 1
    assert config.replay_policy is ReplayPolicy.LAST


def test_stream_config_accepts_policy_strings():
    assert StreamConfig(replay_policy="all").replay_policy is ReplayPolicy.ALL
    assert ReplayPolicy.ALL == "all"


def test_stream_config_is_frozen():
    config = StreamConfig(buffer_size=3)
    with pytest.raises(ValidationError):
        config.buffer_size = 4


def test_stream_config_equality_is_structural():
    assert StreamConfig(buffer_size=5) == StreamConfig(buffer_size=5, replay_policy="last")
    assert StreamConfig(buffer_size=5) != StreamConfig(buffer_size=5, replay_policy="all")


@pytest.mark.parametrize(
    "raw",
    [
        {"buffer_size": 0},
        {"buffer_size": -3},
        {"replay_policy": "first"},
        {"bufferSize": 10},
        {"buffer_size": True},
        {"buffer_size": "10"},
        {"buffer_size": 10.0},
    ],
)
def test_to_stream_config_rejects_bad_values(raw):
    with pytest.raises(InvalidArgumentError):
        to_stream_config(raw)


def test_to_stream_config_rejects_non_mapping():
    with pytest.raises(InvalidArgumentError):
        to_stream_config(["buffer_size", 3])


def test_config_given():
    assert not config_given(None)
    assert not config_given({})
    assert config_given({"buffer_size": 1})
    assert config_given(StreamConfig())


def test_subscribe_options_keywords_override_mapping():
    keep_even = lambda v: v % 2 == 0  # noqa: E731
    opts = to_subscribe_options({"replay_policy": "last"}, filter=keep_even, replay_policy="all")
    assert opts.filter is keep_even
    assert opts.replay_policy is ReplayPolicy.ALL


def test_subscribe_options_from_model():
    base = SubscribeOptions(replay_policy="all")
    opts = to_subscribe_options(base)
    assert opts.replay_policy is ReplayPolicy.ALL
    assert opts.filter is None


def test_subscribe_options_reject_non_callable_filter():
    with pytest.raises(InvalidArgumentError):
        to_subscribe_options({"filter": 42})


def test_subscribe_options_model_passes_through_unchanged():
    base = SubscribeOptions(replay_policy="last")
    assert to_subscribe_options(base) is base
