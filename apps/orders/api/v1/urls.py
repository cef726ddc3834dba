from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.orders.api.v1.views import OrderQuoteViewSet

router = DefaultRouter()
router.register(r'', OrderQuoteViewSet, basename='order')

urlpatterns = [
    path('', include(router.urls)),
]
