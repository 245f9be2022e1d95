"""
URL configuration for inventory app.
"""
from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import StockViewSet

app_name = 'inventory'

router = SimpleRouter()
router.register(r'stock', StockViewSet, basename='stock')

urlpatterns = [
    path('', include(router.urls)),
]
