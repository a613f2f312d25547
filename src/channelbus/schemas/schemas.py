from enum import Enum
from typing import Annotated, Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from channelbus.utilities.constants import DEFAULT_BUFFER_SIZE, DEFAULT_REPLAY_POLICY


class ReplayPolicy(str, Enum):
    LAST = "last"
    ALL = "all"


class StreamConfig(BaseModel):
    '''Per-channel settings, fixed for the lifetime of the stream built from it.'''

    model_config = ConfigDict(frozen=True, extra="forbid")

    # strict: no coercion of True, "10" or 10.0
    buffer_size: Annotated[int, Field(strict=True, gt=0)] = DEFAULT_BUFFER_SIZE
    replay_policy: ReplayPolicy = ReplayPolicy(DEFAULT_REPLAY_POLICY)


class SubscribeOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # None accepts every value
    filter: Optional[Callable[[Any], bool]] = None
    # None falls back to the stream's policy
    replay_policy: Optional[ReplayPolicy] = None
