from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from payrollpro.employees.api.views import EmployeeViewSet
from payrollpro.notifications.api.views import NotificationViewSet
from payrollpro.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("employees", EmployeeViewSet, basename="employees")
router.register("notifications", NotificationViewSet, basename="notifications")


app_name = "api"
urlpatterns = [
    path(
        "audit/",
        include(("payrollpro.audit.api.urls", "audit"), namespace="audit"),
    ),
    path("attendance/", include("payrollpro.attendance.api.urls")),
    path("leaves/", include("payrollpro.leaves.api.urls")),
    path("payroll/", include("payrollpro.payroll.api.urls")),
    path("tax/", include("payrollpro.tax.api.urls")),
    *router.urls,
]
