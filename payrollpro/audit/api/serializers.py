from __future__ import annotations

from rest_framework import serializers

from payrollpro.audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    actor = serializers.CharField(source="actor.display_name", default=None)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "action",
            "message",
            "model_name",
            "record_id",
            "before",
            "after",
            "ip_address",
            "created_at",
            "actor",
        ]
