import asyncio
import logging

from channelbus import ChannelRegistry

from subscriber_example import register_late_subscriber, register_subscribers

USERS = [
    {"id": 1, "name": "Albert", "age": 55},
    {"id": 2, "name": "Bethany", "age": 25},
    {"id": 3, "name": "Charles", "age": 75},
    {"id": 4, "name": "Dax", "age": 18},
]


async def main():
    bus = ChannelRegistry()
    register_subscribers(bus)

    # one update per second, then a late subscriber
    for user in USERS:
        print("Publishing:", user)
        bus.set_state("username", user)
        await asyncio.sleep(1)

    await asyncio.sleep(1)
    late = register_late_subscriber(bus)
    print("Late subscriber got:", late.last_value)

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(main())
