"""Catalog URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.catalog.views import FoodViewSet

router = DefaultRouter(trailing_slash=True)
router.register("foods", FoodViewSet, basename="food")

urlpatterns = router.urls
