from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class LeavesConfig(AppConfig):
    name = "payrollpro.leaves"
    verbose_name = _("Leaves")

    def ready(self):
        import payrollpro.leaves.signals  # noqa: F401, PLC0415
