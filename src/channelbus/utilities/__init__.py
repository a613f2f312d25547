from channelbus.utilities.constants import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_CHANNEL,
    DEFAULT_REPLAY_POLICY,
    MISSING,
)
from channelbus.utilities.errors import ChannelBusError, ConfigConflictError, InvalidArgumentError
