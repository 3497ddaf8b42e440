"""Inventory URL routes (v1)."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import (
    CategoryStatsView,
    CategoryViewSet,
    DashboardView,
    InventoryHealthView,
    InventoryItemViewSet,
    ReservationViewSet,
    StockTrendView,
    TransactionViewSet,
)

router = SimpleRouter()
router.register(r"items", InventoryItemViewSet, basename="item")
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"transactions", TransactionViewSet, basename="transaction")
router.register(r"reservations", ReservationViewSet, basename="reservation")

urlpatterns = [
    path("health/", InventoryHealthView.as_view(), name="inventory-health"),
    path("dashboard/", DashboardView.as_view(), name="inventory-dashboard"),
    path("reports/category-stats/", CategoryStatsView.as_view(), name="report-category-stats"),
    path("reports/stock-trend/", StockTrendView.as_view(), name="report-stock-trend"),
    path("", include(router.urls)),
]
