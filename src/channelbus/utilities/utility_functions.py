from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Optional

from pydantic import ValidationError

from channelbus.schemas import ReplayPolicy, StreamConfig, SubscribeOptions
from channelbus.utilities.errors import InvalidArgumentError

if TYPE_CHECKING:
    from channelbus.models.stream import BufferedStream


# ------------ Argument checks ------------
def validate_channel(channel: Any) -> str:
    if not isinstance(channel, str) or not channel:
        raise InvalidArgumentError("Channel is required")
    return channel


def validate_callback(callback: Any) -> Callable[[Any], Any]:
    if callback is None:
        raise InvalidArgumentError("Callback is required")
    if not callable(callback):
        raise InvalidArgumentError(f"Callback must be callable, got {type(callback).__name__}")
    return callback


def config_given(config: Any) -> bool:
    '''True when a caller actually supplied settings (None and {} mean "use what is there").'''
    if config is None:
        return False
    if isinstance(config, StreamConfig):
        return True
    return bool(config)


def to_stream_config(config: Any) -> StreamConfig:
    if config is None:
        return StreamConfig()
    if isinstance(config, StreamConfig):
        return config
    if not isinstance(config, Mapping):
        raise InvalidArgumentError(f"stream_config must be a mapping or StreamConfig, got {type(config).__name__}")
    try:
        return StreamConfig.model_validate(dict(config))
    except ValidationError as exc:
        raise InvalidArgumentError(f"invalid stream_config: {exc}") from exc


def to_subscribe_options(
    options: Any = None,
    filter: Optional[Callable[[Any], bool]] = None,
    replay_policy: Optional[Any] = None,
) -> SubscribeOptions:
    '''Merge an options object/mapping with keyword overrides (keywords win).'''
    if isinstance(options, SubscribeOptions) and filter is None and replay_policy is None:
        return options
    if options is None:
        merged = {}
    elif isinstance(options, SubscribeOptions):
        merged = {"filter": options.filter, "replay_policy": options.replay_policy}
    elif isinstance(options, Mapping):
        merged = dict(options)
    else:
        raise InvalidArgumentError(f"options must be a mapping or SubscribeOptions, got {type(options).__name__}")
    if filter is not None:
        merged["filter"] = filter
    if replay_policy is not None:
        merged["replay_policy"] = replay_policy
    try:
        return SubscribeOptions.model_validate(merged)
    except ValidationError as exc:
        raise InvalidArgumentError(f"invalid subscribe options: {exc}") from exc


# ------------ Introspection payloads ------------
# Built as plain dicts so they serialise as-is
def make_channel_info(name: str, stream: "BufferedStream") -> dict:
    config = stream.config
    return {
        "name": name,
        "subscribers": stream.get_observer_count(),
        "buffered": len(stream.get_buffer()),
        "replay_policy": ReplayPolicy(config.replay_policy).value,
        "buffer_size": config.buffer_size,
    }


def make_channel_stats(stream: "BufferedStream") -> dict:
    return {
        "messages": stream.published_count,
        "subscribers": stream.get_observer_count(),
        "buffered": len(stream.get_buffer()),
    }


def make_health(started_at: datetime, channels: int, subscribers: int) -> dict:
    uptime_sec = int((datetime.now(timezone.utc) - started_at).total_seconds())
    return {"uptime_sec": uptime_sec, "channels": channels, "subscribers": subscribers}
