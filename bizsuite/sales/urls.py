from django.urls import include, path
from rest_framework.routers import DefaultRouter

from bizsuite.sales.views.order import OrderViewSet
from bizsuite.sales.views.quotation import QuotationViewSet
from bizsuite.sales.views.sales_target import SalesTargetViewSet

router = DefaultRouter()
router.register(r"sales/quotations", QuotationViewSet, basename="quotations")
router.register(r"sales/orders", OrderViewSet, basename="orders")
router.register(r"sales/targets", SalesTargetViewSet, basename="sales-targets")

urlpatterns = [
    path("", include(router.urls)),
]
