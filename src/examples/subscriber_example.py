import logging

from channelbus import ChannelRegistry

logger = logging.getLogger("subscriber_example")


def register_subscribers(bus: ChannelRegistry):
    '''Three views on the same "username" channel.'''
    everyone = bus.get("username").subscribe(lambda user: print("Subscriber 1 (All Updates):", user))
    over_30 = bus.get("username").subscribe(
        lambda user: print("Subscriber 2 (Over 30):", user),
        filter=lambda user: user["age"] >= 30,
    )
    under_30 = bus.get("username").subscribe(
        lambda user: print("Subscriber 3 (Under 30):", user),
        filter=lambda user: user["age"] < 30,
    )
    logger.info("registered %s, %s, %s", everyone.id, over_30.id, under_30.id)
    return everyone, over_30, under_30


def register_late_subscriber(bus: ChannelRegistry):
    # joins after the feed ran; only sees what the buffer still holds
    return bus.subscribe("username", lambda user: print("Subscriber 4 (DELAYED):", user))
