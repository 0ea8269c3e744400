"""
EPI Control URL Configuration
"""
from django.conf import settings
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),

    # API
    path('api/v1/', include('epi_control.api_urls')),
]
