from django.urls import include
from django.urls import path
from rest_framework.routers import SimpleRouter

from payrollpro.leaves.api.views import LeaveRequestViewSet

router = SimpleRouter()
router.register("requests", LeaveRequestViewSet, basename="leave-request")

urlpatterns = [
    path("", include(router.urls)),
]
