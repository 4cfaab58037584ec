import importlib

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class AuditConfig(AppConfig):
    name = "payrollpro.audit"
    verbose_name = _("Audit")

    def ready(self) -> None:  # pragma: no cover
        importlib.import_module("payrollpro.audit.signals")
        return super().ready()
