import logging
import threading
import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional

from channelbus.schemas import ReplayPolicy, StreamConfig, SubscribeOptions
from channelbus.utilities.utility_functions import to_stream_config, to_subscribe_options, validate_callback

logger = logging.getLogger(__name__)


# ------------ In-memory structures ------------
class Subscription:
    ''' One callback registered on a stream.'''

    def __init__(
        self,
        callback: Callable[[Any], Any],
        filter: Optional[Callable[[Any], bool]] = None,
        replay_policy: Optional[ReplayPolicy] = None,
    ):
        # generated here, never derived from the callback
        self.id = uuid.uuid4().hex
        self.callback = callback
        self.filter = filter
        self.replay_policy = replay_policy
        self.paused = False
        # flips to False once removed from the stream; never flips back
        self.active = True

    def accepts(self, value: Any) -> bool:
        if not self.active or self.paused:
            return False
        return self.filter is None or bool(self.filter(value))


class SubscriptionHandle:
    '''Returned by ``subscribe``; the only way to pause, resume or drop a subscription.

    Every method is a no-op once the subscription has been removed, either
    through ``unsubscribe`` or through ``BufferedStream.unsubscribe_all``.
    '''

    def __init__(self, stream: "BufferedStream", subscription: Subscription):
        self._stream = stream
        self._subscription = subscription

    @property
    def id(self) -> str:
        return self._subscription.id

    @property
    def active(self) -> bool:
        return self._subscription.active

    @property
    def paused(self) -> bool:
        return self._subscription.paused

    @property
    def has_value(self) -> bool:
        return self._stream._has_last_value(self._subscription)

    @property
    def last_value(self) -> Any:
        '''Most recent value delivered to this subscription.

        Raises ``LookupError`` if nothing was delivered yet or the
        subscription is gone.
        '''
        return self._stream._last_value(self._subscription)

    def unsubscribe(self) -> None:
        self._stream._remove(self._subscription)

    def pause(self) -> None:
        self._stream._pause(self._subscription)

    def resume(self) -> None:
        self._stream._resume(self._subscription)

    def __repr__(self) -> str:
        state = "paused" if self.paused else "live"
        if not self.active:
            state = "closed"
        return f"<SubscriptionHandle {self.id} {state}>"


class BufferedStream:
    '''Bounded-history multicast stream backing a single channel.

    ``publish`` appends to a ring buffer of ``buffer_size`` values and hands
    the value to every live subscription, synchronously and in subscription
    order. New and resuming subscriptions get a replay of the buffer first:
    the newest value for ``ReplayPolicy.LAST``, all of it for ``ReplayPolicy.ALL``.

    All mutating operations run under one re-entrant lock, delivery included,
    so a callback may publish to the stream it is being called from. The
    subscriber list is snapshotted per delivery pass; subscriptions removed or
    paused mid-pass are skipped, subscriptions added mid-pass are not visited.

    A callback that raises aborts the pass: the error reaches the publisher and
    later subscribers are not notified.
    '''

    def __init__(self, config: Any = None, name: Optional[str] = None):
        self.name = name
        self._config: StreamConfig = to_stream_config(config)
        self._buffer: Deque[Any] = deque(maxlen=self._config.buffer_size)
        # insertion order is delivery order
        self._subscriptions: Dict[str, Subscription] = {}
        # subscription id -> last value handed to it
        self._last_seen: Dict[str, Any] = {}
        self._lock = threading.RLock()
        # stats
        self._published = 0

    @property
    def config(self) -> StreamConfig:
        return self._config

    @property
    def published_count(self) -> int:
        return self._published

    def publish(self, value: Any) -> None:
        with self._lock:
            self._buffer.append(value)
            self._published += 1
            subscriptions: List[Subscription] = list(self._subscriptions.values())
            for sub in subscriptions:
                self._deliver(sub, value)

    def subscribe(
        self,
        callback: Callable[[Any], Any],
        options: Any = None,
        *,
        filter: Optional[Callable[[Any], bool]] = None,
        replay_policy: Any = None,
    ) -> SubscriptionHandle:
        callback = validate_callback(callback)
        opts = to_subscribe_options(options, filter=filter, replay_policy=replay_policy)
        return self._subscribe(callback, opts)

    def _subscribe(self, callback: Callable[[Any], Any], opts: SubscribeOptions) -> SubscriptionHandle:
        # arguments already validated by the caller
        sub = Subscription(callback, opts.filter, opts.replay_policy)
        with self._lock:
            self._subscriptions[sub.id] = sub
            logger.debug("channel %r: subscription %s added (%d total)", self.name, sub.id, len(self._subscriptions))
            try:
                self._replay(sub)
            except Exception:
                # the caller never gets a handle, so don't leave the subscription behind
                self._remove(sub)
                raise
        return SubscriptionHandle(self, sub)

    def get_buffer(self) -> List[Any]:
        with self._lock:
            return list(self._buffer)

    def clear_buffer(self) -> None:
        with self._lock:
            self._buffer.clear()

    def get_observer_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def unsubscribe_all(self) -> None:
        with self._lock:
            for sub in self._subscriptions.values():
                sub.active = False
            count = len(self._subscriptions)
            self._subscriptions.clear()
            self._last_seen.clear()
        logger.debug("channel %r: dropped %d subscriptions", self.name, count)

    def get_replay_policy(self) -> ReplayPolicy:
        return self._config.replay_policy

    # ------------ Handle operations ------------
    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if self._subscriptions.pop(sub.id, None) is None:
                return
            sub.active = False
            self._last_seen.pop(sub.id, None)
        logger.debug("channel %r: subscription %s removed", self.name, sub.id)

    def _pause(self, sub: Subscription) -> None:
        with self._lock:
            if sub.active:
                sub.paused = True

    def _resume(self, sub: Subscription) -> None:
        with self._lock:
            if not sub.active:
                return
            sub.paused = False
            self._replay(sub)

    def _has_last_value(self, sub: Subscription) -> bool:
        with self._lock:
            return sub.id in self._last_seen

    def _last_value(self, sub: Subscription) -> Any:
        with self._lock:
            try:
                return self._last_seen[sub.id]
            except KeyError:
                raise LookupError(f"subscription {sub.id} has not received a value") from None

    # ------------ Delivery ------------
    def _replay(self, sub: Subscription) -> None:
        policy = sub.replay_policy or self._config.replay_policy
        # copy so a callback publishing here can't mutate what we iterate
        backlog = list(self._buffer)
        if policy == ReplayPolicy.LAST:
            backlog = backlog[-1:]
        if backlog:
            logger.debug("channel %r: replaying %d value(s) to %s", self.name, len(backlog), sub.id)
        for value in backlog:
            self._deliver(sub, value)

    def _deliver(self, sub: Subscription, value: Any) -> None:
        if not sub.accepts(value):
            return
        self._last_seen[sub.id] = value
        try:
            sub.callback(value)
        except Exception:
            logger.warning("channel %r: subscriber %s raised; delivery pass aborted", self.name, sub.id)
            raise

    def __repr__(self) -> str:
        return (
            f"<BufferedStream {self.name!r} buffer={len(self._buffer)}/{self._config.buffer_size} "
            f"policy={self._config.replay_policy.value} subscribers={len(self._subscriptions)}>"
        )
