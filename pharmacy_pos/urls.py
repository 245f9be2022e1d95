"""
URL configuration for pharmacy_pos project.
"""
from django.contrib import admin
from django.urls import include, path

from pharmacy_pos.views import landing_entry_view

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', landing_entry_view, name='landing'),

    # API endpoints (REST API)
    path('api/medicines/', include('apps.medicines.urls')),
    path('api/inventory/', include('apps.inventory.urls')),
    path('api/sales/', include('apps.sales.urls')),
    path('api/dashboard/', include('apps.dashboard.urls')),
    path('api/assistant/', include('apps.assistant.urls')),
]
