# tests/test_notifications.py

"""
Notification fan-out, own-feed endpoints and broadcasts.
"""

from fastapi.testclient import TestClient
from unittest.mock import patch

from core.config import settings
from core.notifications import notify_users
from models.enums import NotificationType


def seed_notification(fake_db, user_id, title="Hello", is_read=False):
    return fake_db.seed(
        "notifications",
        user_id=user_id,
        title=title,
        message=f"{title} message",
        type="info",
        is_read=is_read,
    )


# -----------------------------------------------------
# Fan-out
# -----------------------------------------------------
def test_fanout_writes_one_row_per_distinct_recipient(fake_db):
    result = notify_users(fake_db, ["a", "b", "a", None, "c"], "Water cut", "Tomorrow 10-12", NotificationType.warning)

    assert (result.attempted, result.delivered, result.failed) == (3, 3, 0)
    rows = fake_db.rows("notifications")
    assert sorted(r["user_id"] for r in rows) == ["a", "b", "c"]
    assert all(r["is_read"] is False and r["type"] == "warning" for r in rows)


def test_fanout_failed_chunk_is_skipped(fake_db):
    fake_db.fail("notifications", "insert", after=1)

    with patch.object(settings, "FANOUT_BATCH_SIZE", 2):
        result = notify_users(fake_db, ["a", "b", "c", "d", "e"], "t", "m")

    assert result.attempted == 5
    assert result.delivered == 3
    assert result.failed == 2
    # first chunk stays written, no rollback
    assert sorted(r["user_id"] for r in fake_db.rows("notifications")) == ["a", "b", "e"]


def test_empty_fanout_is_a_no_op(fake_db):
    result = notify_users(fake_db, [], "t", "m")
    assert result.attempted == 0
    assert fake_db.rows("notifications") == []


# -----------------------------------------------------
# Own feed
# -----------------------------------------------------
def test_list_is_own_and_newest_first(client: TestClient, fake_db, resident, other_resident):
    seed_notification(fake_db, resident.id, "first")
    seed_notification(fake_db, other_resident.id, "not mine")
    seed_notification(fake_db, resident.id, "second")

    response = client.get("/notifications", headers=resident.headers)
    assert response.status_code == 200
    assert [n["title"] for n in response.json()] == ["second", "first"]


def test_unread_filter_and_count(client: TestClient, fake_db, resident):
    seed_notification(fake_db, resident.id, "old", is_read=True)
    seed_notification(fake_db, resident.id, "new")

    unread = client.get("/notifications?unread_only=true", headers=resident.headers).json()
    assert [n["title"] for n in unread] == ["new"]
    assert client.get("/notifications/unread-count", headers=resident.headers).json() == {"unread": 1}


def test_mark_read_only_own(client: TestClient, fake_db, resident, other_resident):
    mine = seed_notification(fake_db, resident.id)
    theirs = seed_notification(fake_db, other_resident.id)

    assert client.post(f"/notifications/{mine['id']}/read", headers=resident.headers).json()["is_read"] is True
    assert client.post(f"/notifications/{theirs['id']}/read", headers=resident.headers).status_code == 404


def test_mark_all_read_leaves_others_untouched(client: TestClient, fake_db, resident, other_resident):
    for i in range(3):
        seed_notification(fake_db, resident.id, f"mine {i}")
    for i in range(2):
        seed_notification(fake_db, other_resident.id, f"theirs {i}")

    response = client.post("/notifications/read-all", headers=resident.headers)
    assert response.json() == {"status": "ok", "updated": 3}

    assert client.get("/notifications/unread-count", headers=resident.headers).json()["unread"] == 0
    assert client.get("/notifications/unread-count", headers=other_resident.headers).json()["unread"] == 2


# -----------------------------------------------------
# Broadcast
# -----------------------------------------------------
def test_broadcast_to_all_residents(client: TestClient, fake_db, admin, resident, other_resident, staff):
    response = client.post(
        "/notifications/broadcast",
        json={"title": "Lift maintenance", "message": "Lift B off on Sunday", "type": "warning"},
        headers=admin.headers,
    )

    assert response.status_code == 200
    assert response.json() == {"attempted": 2, "delivered": 2, "failed": 0}
    assert {r["user_id"] for r in fake_db.rows("notifications")} == {resident.id, other_resident.id}


def test_broadcast_to_single_recipient(client: TestClient, fake_db, staff, resident):
    response = client.post(
        "/notifications/broadcast",
        json={"title": "Visiting today", "message": "Plumber at 3pm", "recipient_id": resident.id},
        headers=staff.headers,
    )
    assert response.json()["delivered"] == 1
    assert [r["user_id"] for r in fake_db.rows("notifications")] == [resident.id]


def test_residents_cannot_broadcast(client: TestClient, resident):
    response = client.post(
        "/notifications/broadcast",
        json={"title": "Spam", "message": "Hello all"},
        headers=resident.headers,
    )
    assert response.status_code == 403


def test_single_recipient_must_be_a_resident(client: TestClient, fake_db, admin, other_staff):
    for recipient_id in (other_staff.id, "no-such-user"):
        response = client.post(
            "/notifications/broadcast",
            json={"title": "Visiting today", "message": "Plumber at 3pm", "recipient_id": recipient_id},
            headers=admin.headers,
        )
        assert response.status_code == 400

    assert fake_db.rows("notifications") == []
