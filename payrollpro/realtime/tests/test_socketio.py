import pytest

from payrollpro.notifications.services import notify_user
from payrollpro.realtime import socketio as rt
from payrollpro.realtime.events import notifications as events


def test_rooms_for_admin_employee():
    ctx = rt.UserRealtimeContext(
        user_id=3, group_names=("Admin", "Payroll Team"), employee_id=9, is_admin=True
    )
    assert rt.rooms_for_context(ctx) == [
        "user_3",
        "employee_9",
        "group_admin",
        "group_payroll_team",
        "group_admins",
    ]


def test_rooms_for_plain_user():
    ctx = rt.UserRealtimeContext(
        user_id=4, group_names=(), employee_id=None, is_admin=False
    )
    assert rt.rooms_for_context(ctx) == ["user_4"]


@pytest.mark.parametrize(
    ("environ", "auth", "expected"),
    [
        ({"asgi.scope": {"query_string": b"token=abc&x=1"}}, None, "abc"),
        ({"QUERY_STRING": "token=wsgi"}, None, "wsgi"),
        ({"asgi.scope": {"query_string": b""}}, {"token": "from-auth"}, "from-auth"),
        ({}, None, None),
    ],
)
def test_extract_token(environ, auth, expected):
    assert rt._extract_token(environ, auth) == expected  # noqa: SLF001


def test_emit_is_noop_when_disabled(settings, monkeypatch):
    settings.REALTIME_ENABLED = False
    calls = []
    monkeypatch.setattr(rt.sio, "emit", lambda *a, **kw: calls.append(a))
    rt.emit_event_to_user(1, "notification", {})
    assert calls == []


@pytest.mark.django_db
def test_push_failure_is_logged_not_raised(user, settings, monkeypatch, caplog):
    settings.REALTIME_ENABLED = True

    async def broken_emit(*args, **kwargs):
        raise ConnectionError("redis down")

    monkeypatch.setattr(rt.sio, "emit", broken_emit)
    notification = notify_user(user, "Hi", "there")

    events.publish_notification_created(notification)

    assert "Realtime push failed" in caplog.text


@pytest.mark.django_db
def test_notification_payload(user):
    notification = notify_user(user, "Payslip", "ready", link="/payroll/payslips/1/")
    payload = events.build_notification_payload(notification)
    assert payload["title"] == "Payslip"
    assert payload["type"] == "system_alert"
    assert payload["link"] == "/payroll/payslips/1/"
