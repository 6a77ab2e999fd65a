# core/notifications.py
import requests
from typing import Iterable, List, Optional

from core.config import settings
from core.logging_config import logger
from core.realtime import change_feed
from models.enums import NotificationType, Role
from models.notification import FanoutResult

NOTIFICATIONS_TABLE = "notifications"


def _chunks(rows: List[dict], size: int):
    size = max(1, size)
    for start in range(0, len(rows), size):
        yield rows[start:start + size]


# -----------------------------------------------------
# 🔔 Fan-out: one notification row per recipient
# -----------------------------------------------------
def notify_users(
    client,
    recipient_ids: Iterable[str],
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.info,
) -> FanoutResult:
    """
    Batch-insert one unread notification per distinct recipient.

    Chunks are inserted independently: a failed chunk is logged and
    skipped, chunks already written stay written. The result says how
    many rows were attempted / delivered / failed.
    """
    recipients = [r for r in dict.fromkeys(recipient_ids) if r]
    rows = [
        {
            "user_id": user_id,
            "title": title,
            "message": message,
            "type": NotificationType(notification_type).value,
            "is_read": False,
        }
        for user_id in recipients
    ]

    result = FanoutResult(attempted=len(rows))

    for chunk in _chunks(rows, settings.FANOUT_BATCH_SIZE):
        try:
            inserted = (
                client.table(NOTIFICATIONS_TABLE)
                .insert(chunk, returning="representation")
                .execute()
            )
        except Exception as e:
            result.failed += len(chunk)
            logger.warning(f"Notification fan-out chunk of {len(chunk)} failed: {e}")
            continue

        result.delivered += len(chunk)
        for row in inserted.data or chunk:
            change_feed.publish(NOTIFICATIONS_TABLE, "INSERT", row)

    if result.attempted:
        logger.info(
            f"Notification '{title}' fanned out: "
            f"{result.delivered}/{result.attempted} delivered, {result.failed} failed"
        )
    return result


def user_ids_with_role(client, role: Role) -> List[str]:
    result = (
        client.table("user_roles")
        .select("user_id")
        .eq("role", role.value)
        .execute()
    )
    return [row["user_id"] for row in (result.data or []) if row.get("user_id")]


def notify_all_residents(
    client,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.info,
) -> FanoutResult:
    return notify_users(client, user_ids_with_role(client, Role.resident), title, message, notification_type)


def notify_quietly(client, recipient_ids: Iterable[Optional[str]], title: str, message: str,
                   notification_type: NotificationType = NotificationType.complaint) -> FanoutResult:
    """
    Milestone notifications must never fail the action that triggered them.
    """
    try:
        return notify_users(client, [r for r in recipient_ids if r], title, message, notification_type)
    except Exception as e:
        logger.warning(f"Milestone notification '{title}' skipped: {e}")
        return FanoutResult()


# -----------------------------------------------------
# 📨 Send webhook (Discord, Slack, etc.)
# -----------------------------------------------------
def send_webhook_message(message: str):
    webhook_url = settings.EMERGENCY_WEBHOOK_URL
    if not webhook_url:
        logger.debug("Webhook URL not configured, skipping.")
        return

    try:
        payload = {"content": message}
        response = requests.post(webhook_url, json=payload, timeout=10)
        logger.info(f"Webhook sent (status {response.status_code})")
    except Exception as e:
        logger.warning(f"Webhook failed: {e}")
