# tests/test_realtime.py

"""
In-process change feed and the notifications websocket.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from core.notifications import notify_users
from core.realtime import ChangeFeed


def test_publish_reaches_matching_subscribers_only():
    feed = ChangeFeed(queue_size=10)
    mine = feed.subscribe("notifications", {"user_id": "u1"})
    theirs = feed.subscribe("notifications", {"user_id": "u2"})
    complaints = feed.subscribe("complaints")

    delivered = feed.publish("notifications", "INSERT", {"id": "n1", "user_id": "u1"})

    assert delivered == 1
    assert [e.record["id"] for e in mine.drain()] == ["n1"]
    assert theirs.drain() == []
    assert complaints.drain() == []


def test_full_queue_drops_events():
    feed = ChangeFeed(queue_size=2)
    subscription = feed.subscribe("complaints")

    for i in range(5):
        feed.publish("complaints", "UPDATE", {"id": str(i)})

    assert [e.record["id"] for e in subscription.drain()] == ["0", "1"]
    assert subscription.dropped == 3


def test_unsubscribe_stops_delivery():
    feed = ChangeFeed()
    with feed.subscribe("meetings") as subscription:
        assert feed.subscriber_count("meetings") == 1

    assert feed.subscriber_count() == 0
    assert not subscription.active
    assert feed.publish("meetings", "INSERT", {"id": "m1"}) == 0
    assert subscription.get() is None


def test_websocket_pushes_own_notifications(client: TestClient, fake_db, resident, other_resident):
    with client.websocket_connect(f"/realtime/notifications?token={resident.token}") as ws:
        assert ws.receive_json() == {"type": "subscribed", "table": "notifications"}

        notify_users(fake_db, [other_resident.id], "Not for you", "m")
        notify_users(fake_db, [resident.id], "For you", "m")

        event = ws.receive_json()
        assert event["type"] == "change"
        assert event["event"] == "INSERT"
        assert event["record"]["user_id"] == resident.id
        assert event["record"]["title"] == "For you"


def test_websocket_rejects_bad_token(client: TestClient):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/realtime/notifications?token=bogus") as ws:
            ws.receive_json()


def test_websocket_requires_token(client: TestClient):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/realtime/notifications") as ws:
            ws.receive_json()
