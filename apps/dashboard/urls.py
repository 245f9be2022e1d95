"""
URL configuration for dashboard app.
"""
from django.urls import path

from .views import dashboard_summary

app_name = 'dashboard'

urlpatterns = [
    path('summary/', dashboard_summary, name='summary'),
]
