"""
URL configuration for assistant app.
"""
from django.urls import path

from . import views

app_name = 'assistant'

urlpatterns = [
    path('snapshot/', views.snapshot, name='snapshot'),
    path('ask/', views.ask, name='ask'),
    path('inventory-health/', views.inventory_health, name='inventory-health'),
]
