from django.urls import include, path
from rest_framework.routers import DefaultRouter

from bizsuite.requisitions.views.requisition import RequisitionViewSet

router = DefaultRouter()
# register viewset under /api/requisitions/
router.register(r"requisitions", RequisitionViewSet, basename="requisitions")

urlpatterns = [
    path("", include(router.urls)),
]
