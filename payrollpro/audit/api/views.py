from __future__ import annotations

from typing import TYPE_CHECKING

from drf_spectacular.utils import extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from payrollpro.audit.api.serializers import AuditLogSerializer
from payrollpro.audit.models import AuditLog
from payrollpro.users.api.permissions import IsPayrollAdmin

if TYPE_CHECKING:
    from django.db.models import QuerySet


@extend_schema(tags=["Audit"], responses=AuditLogSerializer(many=True))
class RecentAuditView(APIView):
    """Latest audit entries, optionally for one entity (``model``/``record``)."""

    permission_classes = [IsPayrollAdmin]

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", "10"))
        except (TypeError, ValueError):
            limit = 10
        limit = max(1, min(limit, 100))

        qs: QuerySet[AuditLog] = AuditLog.objects.select_related("actor")
        model_name = request.query_params.get("model")
        if model_name:
            qs = qs.filter(model_name=model_name)
        record_id = request.query_params.get("record")
        if record_id and record_id.isdigit():
            qs = qs.filter(record_id=int(record_id))
        rows = list(qs[:limit])
        data = AuditLogSerializer(rows, many=True).data
        return Response({"results": data, "limit": limit})
