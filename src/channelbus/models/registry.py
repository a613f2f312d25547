import logging
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from channelbus.models.stream import BufferedStream, SubscriptionHandle
from channelbus.schemas import ReplayPolicy, StreamConfig
from channelbus.utilities.constants import DEFAULT_CHANNEL, MISSING
from channelbus.utilities.errors import ConfigConflictError, InvalidArgumentError
from channelbus.utilities.utility_functions import (
    config_given,
    to_stream_config,
    to_subscribe_options,
    validate_callback,
    validate_channel,
)

logger = logging.getLogger(__name__)


class ChannelMap:
    '''Channel name -> BufferedStream, shared by every registry bound to it.'''

    def __init__(self):
        self._streams: Dict[str, BufferedStream] = {}
        self._lock = threading.Lock()

    def get_or_create(self, name: str, config: StreamConfig) -> Tuple[BufferedStream, bool]:
        with self._lock:
            stream = self._streams.get(name)
            if stream is not None:
                return stream, False
            stream = BufferedStream(config, name=name)
            self._streams[name] = stream
        logger.debug(
            "created channel %r (buffer_size=%d, replay_policy=%s)",
            name, config.buffer_size, config.replay_policy.value,
        )
        return stream, True

    def get(self, name: str) -> Optional[BufferedStream]:
        with self._lock:
            return self._streams.get(name)

    def items(self) -> List[Tuple[str, BufferedStream]]:
        with self._lock:
            return list(self._streams.items())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._streams

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            names = list(self._streams)
        return iter(names)

    def __len__(self) -> int:
        with self._lock:
            return len(self._streams)


# Global registry, created on first use and kept for the life of the process
_default_channels: Optional[ChannelMap] = None
_default_lock = threading.Lock()


def default_channel_map() -> ChannelMap:
    global _default_channels
    with _default_lock:
        if _default_channels is None:
            _default_channels = ChannelMap()
        return _default_channels


class ChannelRegistry:
    '''Named-channel front end over a ``ChannelMap``.

    Registries built without ``backing_map`` share the process-wide default
    map and therefore see the same channels. The first registry to populate a
    map's ``"default"`` channel fixes its config; later registries on the same
    map may omit ``stream_config`` or repeat an equal one, anything else raises
    ``ConfigConflictError``.

    Every channel exists once addressed: all channel operations, reads
    included, create the channel with this registry's ``stream_config`` when
    it is missing.
    '''

    def __init__(self, backing_map: Optional[ChannelMap] = None, stream_config: Any = None):
        if backing_map is None:
            backing_map = default_channel_map()
        elif not isinstance(backing_map, ChannelMap):
            raise InvalidArgumentError(f"backing_map must be a ChannelMap, got {type(backing_map).__name__}")
        config = to_stream_config(stream_config)

        default, created = backing_map.get_or_create(DEFAULT_CHANNEL, config)
        if not created and config_given(stream_config) and default.config != config:
            logger.warning(
                "refusing stream_config %s: channel %r already configured with %s",
                config, DEFAULT_CHANNEL, default.config,
            )
            raise ConfigConflictError(
                f"channel {DEFAULT_CHANNEL} already exists with {default.config!r}, cannot pass {config!r}"
            )

        self._channels = backing_map
        self._config = config

    @property
    def backing_map(self) -> ChannelMap:
        return self._channels

    @property
    def stream_config(self) -> StreamConfig:
        return self._config

    def _stream(self, channel: Any) -> BufferedStream:
        return self._materialize(validate_channel(channel))

    def _materialize(self, name: str) -> BufferedStream:
        stream, _ = self._channels.get_or_create(name, self._config)
        return stream

    def get(self, channel: str) -> BufferedStream:
        return self._stream(channel)

    def set_state(self, channel: str, value: Any = MISSING) -> None:
        name = validate_channel(channel)
        if value is MISSING:
            raise InvalidArgumentError("New state is required")
        self._materialize(name).publish(value)

    def subscribe(
        self,
        channel: str,
        callback: Callable[[Any], Any],
        options: Any = None,
        *,
        filter: Optional[Callable[[Any], bool]] = None,
        replay_policy: Any = None,
    ) -> SubscriptionHandle:
        # validate everything before the channel is created
        name = validate_channel(channel)
        callback = validate_callback(callback)
        opts = to_subscribe_options(options, filter=filter, replay_policy=replay_policy)
        return self._materialize(name)._subscribe(callback, opts)

    def unsubscribe_all(self, channel: str) -> None:
        self._stream(channel).unsubscribe_all()

    def clear_buffer(self, channel: str) -> None:
        self._stream(channel).clear_buffer()

    def get_replay_policy(self, channel: str) -> ReplayPolicy:
        return self._stream(channel).get_replay_policy()

    def channels(self) -> List[str]:
        return sorted(self._channels)

    def has_channel(self, channel: str) -> bool:
        return channel in self._channels
