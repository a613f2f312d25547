import threading

import pytest
from fastapi.testclient import TestClient

from channelbus import ChannelRegistry
from channelbus.main import create_app


@pytest.fixture
def client(bus):
    return TestClient(create_app(bus))


def test_health_counts_channels_and_subscribers(bus, client):
    bus.subscribe("orders", lambda v: None)
    bus.subscribe("orders", lambda v: None)
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["channels"] == 2  # "default" and "orders"
    assert body["subscribers"] == 2
    assert body["uptime_sec"] >= 0
    assert set(body) == {"uptime_sec", "channels", "subscribers"}


def test_list_channels(channels):
    bus = ChannelRegistry(backing_map=channels, stream_config={"buffer_size": 3, "replay_policy": "all"})
    bus.set_state("orders", {"id": "ORD-1"})
    client = TestClient(create_app(bus))
    resp = client.get("/channels")
    assert resp.json() == {
        "channels": [
            {"name": "default", "subscribers": 0, "buffered": 0, "replay_policy": "all", "buffer_size": 3},
            {"name": "orders", "subscribers": 0, "buffered": 1, "replay_policy": "all", "buffer_size": 3},
        ]
    }


def test_stats_count_published_messages(bus, client):
    for i in range(3):
        bus.set_state("orders", i)
    bus.clear_buffer("orders")
    stats = client.get("/stats").json()["channels"]
    assert stats["orders"] == {"messages": 3, "subscribers": 0, "buffered": 0}


def test_clear_buffer_over_http(bus, client):
    bus.set_state("orders", "pending")
    resp = client.delete("/channels/orders/buffer")
    assert resp.status_code == 200
    assert resp.json() == {"status": "cleared", "channel": "orders"}
    assert bus.get("orders").get_buffer() == []


def test_clear_buffer_unknown_channel_is_404(bus, client):
    resp = client.delete("/channels/nope/buffer")
    assert resp.status_code == 404
    assert not bus.has_channel("nope")


def test_app_without_registry_reads_default_map(fresh_default):
    client = TestClient(create_app())
    assert client.get("/channels").json() == {"channels": []}
    # mounting the app must not pin the default channel's config
    ChannelRegistry(stream_config={"buffer_size": 7})
    assert client.get("/channels").json()["channels"][0]["buffer_size"] == 7


def test_requests_complete_while_a_publish_is_in_progress(bus):
    entered, release = threading.Event(), threading.Event()

    def slow_subscriber(value):
        entered.set()
        release.wait(5)

    bus.subscribe("slow", slow_subscriber)
    bus.set_state("other", "x")
    publisher = threading.Thread(target=bus.set_state, args=("slow", "go"))
    publisher.start()
    assert entered.wait(5)

    responses = {}
    with TestClient(create_app(bus)) as client:
        try:
            # waits on the busy channel's lock in a worker thread
            health = threading.Thread(target=lambda: responses.update(health=client.get("/health")))
            health.start()
            health.join(0.2)

            other = threading.Thread(
                target=lambda: responses.update(other=client.delete("/channels/other/buffer"))
            )
            other.start()
            other.join(2)
            assert not other.is_alive()
            assert responses["other"].status_code == 200
            assert "health" not in responses

            release.set()
            health.join(5)
            assert responses["health"].status_code == 200
        finally:
            release.set()
    publisher.join(5)
    assert bus.get("other").get_buffer() == []
