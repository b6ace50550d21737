"""
URL configuration for the AISHE records backend.

Only operational endpoints live here; records are loaded with the
import_universities / import_colleges management commands.
"""
from django.contrib import admin
from django.urls import path

from catalog.api import api_catalog_status
from system.views import health

urlpatterns = [
    path('_health/', health, name='health'),
    path('_health', health, name='health_no_slash'),
    path('api/catalog/status', api_catalog_status, name='api_catalog_status'),
    path('admin/', admin.site.urls),
]
