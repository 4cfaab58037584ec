from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from payrollpro.realtime.socketio import emit_event_to_admins
from payrollpro.realtime.socketio import emit_event_to_user

if TYPE_CHECKING:  # import for type checking only
    from payrollpro.notifications.models import Notification

logger = logging.getLogger(__name__)


def build_notification_payload(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.notification_type,
        "link": notification.related_link,
        "created_at": notification.created_at.isoformat(),
    }


def publish_notification_created(notification: Notification) -> None:
    """Push a newly created Notification to its recipient.

    Runs after commit; a push failure never affects the stored row.
    """

    payload = build_notification_payload(notification)
    try:
        emit_event_to_user(notification.recipient_id, "notification", payload)
    except Exception:  # noqa: BLE001
        logger.warning(
            "Realtime push failed for notification %s", notification.id, exc_info=True
        )


def publish_payroll_event(event: str, payload: dict[str, Any]) -> None:
    """Broadcast a payroll workflow event (processed, paid) to admins."""

    try:
        emit_event_to_admins(event, payload)
    except Exception:  # noqa: BLE001
        logger.warning("Realtime push failed for %s", event, exc_info=True)
