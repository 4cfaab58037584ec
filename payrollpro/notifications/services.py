"""Creating in-app notifications.

Rows are pushed over Socket.IO by the post-save signal once the
surrounding transaction commits.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db.models import Q

from payrollpro.users.api.permissions import ROLE_ADMIN
from payrollpro.users.api.permissions import ROLE_PAYROLL

from .models import Notification

logger = logging.getLogger(__name__)


def notify_user(
    user,
    title: str,
    message: str,
    notification_type: str = Notification.Type.SYSTEM_ALERT,
    *,
    link: str = "",
) -> Notification:
    return Notification.objects.create(
        recipient=user,
        title=title,
        message=message,
        notification_type=notification_type,
        related_link=link,
    )


def admin_users():
    user_model = get_user_model()
    return (
        user_model.objects.filter(is_active=True)
        .filter(
            Q(is_staff=True)
            | Q(role=user_model.Role.ADMIN)
            | Q(groups__name__in=[ROLE_ADMIN, ROLE_PAYROLL])
        )
        .distinct()
    )


def notify_admins(
    title: str,
    message: str,
    notification_type: str = Notification.Type.SYSTEM_ALERT,
    *,
    link: str = "",
) -> list[Notification]:
    """One notification row per payroll admin."""
    created = [
        notify_user(admin, title, message, notification_type, link=link)
        for admin in admin_users()
    ]
    logger.debug("Notified %d admins: %s", len(created), title)
    return created
