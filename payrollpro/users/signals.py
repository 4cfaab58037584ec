from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.db.models.signals import post_save
from django.dispatch import receiver

from payrollpro.users.api.permissions import ROLE_ADMIN
from payrollpro.users.api.permissions import ROLE_EMPLOYEE


@receiver(post_save, sender=get_user_model())
def add_role_group(sender, instance, created, **kwargs):
    """Keep the user's Django group in step with ``User.role``.

    New users land in the least-privileged ``Employee`` group; admins are
    added to ``Admin`` as well. The group is created if missing.
    """

    names = [ROLE_EMPLOYEE] if created else []
    if instance.role == instance.Role.ADMIN:
        names.append(ROLE_ADMIN)
    for name in names:
        group, _ = Group.objects.get_or_create(name=name)
        instance.groups.add(group)
