from django.urls import include
from django.urls import path
from rest_framework.routers import SimpleRouter

from payrollpro.attendance.api.views import AttendanceViewSet
from payrollpro.attendance.api.views import LopDaysView

router = SimpleRouter()
router.register("records", AttendanceViewSet, basename="attendance")

urlpatterns = [
    path("lop/", LopDaysView.as_view(), name="attendance-lop"),
    path("", include(router.urls)),
]
