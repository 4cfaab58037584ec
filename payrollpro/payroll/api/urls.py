from rest_framework.routers import SimpleRouter

from .views import PayrollGeneralSettingViewSet
from .views import PayrollRecordViewSet
from .views import PayslipViewSet
from .views import SalaryStructureViewSet

router = SimpleRouter()
router.register("records", PayrollRecordViewSet, basename="payroll-record")
router.register("payslips", PayslipViewSet, basename="payslip")
router.register(
    "salary-structures", SalaryStructureViewSet, basename="salary-structure"
)
router.register("settings", PayrollGeneralSettingViewSet, basename="payroll-setting")

urlpatterns = router.urls
