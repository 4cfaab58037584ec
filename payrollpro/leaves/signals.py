import logging

from django.db.models.signals import post_save
from django.db.models.signals import pre_save
from django.dispatch import receiver

from payrollpro.notifications.models import Notification
from payrollpro.notifications.services import notify_admins
from payrollpro.notifications.services import notify_user

from .models import LeaveRequest

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=LeaveRequest)
def store_old_status(sender, instance, **kwargs):
    instance._old_status = (  # noqa: SLF001
        LeaveRequest.objects.filter(pk=instance.pk)
        .values_list("status", flat=True)
        .first()
        if instance.pk
        else None
    )


@receiver(post_save, sender=LeaveRequest)
def leave_request_notifications(sender, instance, created, **kwargs):
    link = f"/leaves/{instance.id}/"
    if created:
        notify_admins(
            "New Leave Application",
            (
                f"{instance.employee.full_name} applied for {instance.total_days} "
                f"days of {instance.leave_type} leave"
            ),
            Notification.Type.LEAVE_REQUEST,
            link=link,
        )
        return

    old_status = getattr(instance, "_old_status", None)
    if old_status == instance.status:
        return
    if instance.status == LeaveRequest.Status.APPROVED:
        notify_user(
            instance.employee.user,
            "Leave Approved",
            (
                f"Your {instance.leave_type} leave for {instance.total_days} "
                "days has been approved"
            ),
            Notification.Type.LEAVE_APPROVED,
            link=link,
        )
    elif instance.status == LeaveRequest.Status.REJECTED:
        notify_user(
            instance.employee.user,
            "Leave Rejected",
            f"Your {instance.leave_type} leave application has been rejected",
            Notification.Type.LEAVE_REJECTED,
            link=link,
        )
    else:
        logger.debug("Leave %s moved %s -> %s", instance.id, old_status, instance.status)
