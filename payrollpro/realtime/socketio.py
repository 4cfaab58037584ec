"""Socket.IO server shared by every realtime feature.

Frontend convention:
- Socket.IO path: /ws/notifications/
- Auth: `query.token` (JWT access token), `auth.token` as a fallback

Each connection joins ``user_<id>``, ``employee_<id>`` when the user has an
employee profile, one ``group_<name>`` room per Django group and, for
payroll admins, the shared ``group_admins`` room.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import socketio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError

from payrollpro.users.api.permissions import is_payroll_admin

logger = logging.getLogger(__name__)

ADMIN_ROOM = "group_admins"

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*",
    logger=False,
    engineio_logger=False,
)


@dataclass(frozen=True)
class UserRealtimeContext:
    user_id: int
    group_names: tuple[str, ...]
    employee_id: int | None
    is_admin: bool


def _normalize_room_suffix(value: str) -> str:
    return "_".join(value.strip().lower().split())


def room_for_user(user_id: int) -> str:
    return f"user_{int(user_id)}"


def room_for_group(group_name: str) -> str:
    return f"group_{_normalize_room_suffix(group_name)}"


def room_for_employee(employee_id: int) -> str:
    return f"employee_{int(employee_id)}"


@database_sync_to_async
def _get_user_context_from_access_token(token: str) -> UserRealtimeContext:
    jwt_auth = JWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    user = jwt_auth.get_user(validated)

    group_names = tuple(user.groups.order_by("name").values_list("name", flat=True))
    employee = getattr(user, "employee", None)
    employee_id = getattr(employee, "id", None)

    return UserRealtimeContext(
        user_id=int(user.id),
        group_names=group_names,
        employee_id=int(employee_id) if employee_id else None,
        is_admin=is_payroll_admin(user),
    )


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract JWT token from Socket.IO environ/auth.

    Handles python-socketio environ shapes across ASGI/WSGI servers.
    """

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token

    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    return None


def rooms_for_context(ctx: UserRealtimeContext) -> list[str]:
    rooms = [room_for_user(ctx.user_id)]
    if ctx.employee_id is not None:
        rooms.append(room_for_employee(ctx.employee_id))
    rooms.extend(room_for_group(name) for name in ctx.group_names)
    if ctx.is_admin:
        rooms.append(ADMIN_ROOM)
    return rooms


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    token = _extract_token(environ, auth)
    if not token:
        msg = "unauthorized"
        raise ConnectionRefusedError(msg)

    try:
        ctx = await _get_user_context_from_access_token(token)
    except TokenError as exc:
        if "expired" in str(exc).lower():
            msg = "jwt_expired"
            raise ConnectionRefusedError(msg) from exc
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except AuthenticationFailed as exc:  # user not found / inactive, etc.
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except Exception as exc:
        logger.exception("Socket.IO connect error")
        msg = "server_error"
        raise ConnectionRefusedError(msg) from exc

    await sio.save_session(
        sid,
        {
            "user_id": ctx.user_id,
            "employee_id": ctx.employee_id,
            "is_admin": ctx.is_admin,
        },
    )
    for room in rooms_for_context(ctx):
        await sio.enter_room(sid, room)


@sio.event
async def disconnect(sid: str):
    _ = sid


def realtime_enabled() -> bool:
    return bool(getattr(settings, "REALTIME_ENABLED", True))


def emit_event_to_room(room: str, event: str, payload: dict[str, Any]) -> None:
    """Emit an event to a room from sync Django code."""

    if not realtime_enabled():
        logger.debug("Realtime disabled; dropping %s for %s", event, room)
        return
    async_to_sync(sio.emit)(event, payload, room=room)


def emit_event_to_user(user_id: int, event: str, payload: dict[str, Any]) -> None:
    emit_event_to_room(room_for_user(user_id), event, payload)


def emit_event_to_admins(event: str, payload: dict[str, Any]) -> None:
    emit_event_to_room(ADMIN_ROOM, event, payload)
