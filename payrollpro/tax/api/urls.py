from django.urls import path
from rest_framework.routers import SimpleRouter

from payrollpro.tax.api.views import TaxDeclarationViewSet
from payrollpro.tax.api.views import TaxEstimateView

router = SimpleRouter()
router.register("declarations", TaxDeclarationViewSet, basename="tax-declaration")

urlpatterns = [
    path("estimate/", TaxEstimateView.as_view(), name="tax-estimate"),
    *router.urls,
]
