from channelbus.models.stream import BufferedStream, Subscription, SubscriptionHandle
from channelbus.models.registry import ChannelMap, ChannelRegistry, default_channel_map
