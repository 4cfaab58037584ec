from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from payrollpro.audit.models import AuditLog
from payrollpro.audit.utils import log_action

pytestmark = pytest.mark.django_db

URL = "/api/v1/audit/recent/"


def test_requires_payroll_admin(api_client, user):
    api_client.force_authenticate(user=user)
    assert api_client.get(URL).status_code == status.HTTP_403_FORBIDDEN


def test_latest_first_with_limit(admin_client_api):
    base = timezone.now()
    for i in range(6):
        row = AuditLog.objects.create(action=f"test_action_{i}", message=str(i))
        AuditLog.objects.filter(pk=row.pk).update(
            created_at=base + timedelta(seconds=i)
        )

    res = admin_client_api.get(f"{URL}?limit=3")

    assert res.status_code == status.HTTP_200_OK
    assert res.data["limit"] == 3
    assert [r["action"] for r in res.data["results"]] == [
        "test_action_5",
        "test_action_4",
        "test_action_3",
    ]


def test_filter_by_entity(admin_client_api, payroll_admin):
    log_action(
        "payroll_approved",
        actor=payroll_admin,
        model_name="payroll.PayrollRecord",
        record_id=7,
        after={"net_salary": "100.00"},
    )
    log_action("payroll_approved", model_name="payroll.PayrollRecord", record_id=8)

    res = admin_client_api.get(f"{URL}?model=payroll.PayrollRecord&record=7")

    assert len(res.data["results"]) == 1
    row = res.data["results"][0]
    assert row["actor"] == payroll_admin.display_name
    assert row["after"] == {"net_salary": "100.00"}


def test_non_user_actor_stored_as_system():
    entry = log_action("payroll_processed", actor="celery")
    assert entry.actor is None
