"""
channelbus - in-process named-channel pub/sub with replay buffers.

A ``ChannelRegistry`` hands out one ``BufferedStream`` per channel name.
Publishers call ``set_state``; subscribers get live values plus a replay of
the channel's recent history when they subscribe or resume.
"""

from channelbus.models import (
    BufferedStream,
    ChannelMap,
    ChannelRegistry,
    SubscriptionHandle,
    default_channel_map,
)
from channelbus.schemas import ReplayPolicy, StreamConfig, SubscribeOptions
from channelbus.utilities import MISSING, ChannelBusError, ConfigConflictError, InvalidArgumentError

__version__ = "0.1.0"
__all__ = [
    "BufferedStream",
    "ChannelMap",
    "ChannelRegistry",
    "SubscriptionHandle",
    "default_channel_map",
    "ReplayPolicy",
    "StreamConfig",
    "SubscribeOptions",
    "MISSING",
    "ChannelBusError",
    "ConfigConflictError",
    "InvalidArgumentError",
]
