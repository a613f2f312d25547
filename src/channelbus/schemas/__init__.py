from channelbus.schemas.schemas import ReplayPolicy, StreamConfig, SubscribeOptions

__all__ = ["ReplayPolicy", "StreamConfig", "SubscribeOptions"]
