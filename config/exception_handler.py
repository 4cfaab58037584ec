"""DRF exception handler mapping domain errors to ``{"detail", "kind"}``."""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler
from rest_framework.views import set_rollback

from payrollpro.payroll.exceptions import PayrollError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    if isinstance(exc, PayrollError):
        # Requests are atomic; a handled error must still roll back.
        set_rollback()
        view = context.get("view")
        logger.info(
            "%s in %s: %s", exc.kind, type(view).__name__ if view else "-", exc
        )
        return Response(exc.as_dict(), status=exc.status_code)
    return exception_handler(exc, context)
