"""
URL configuration for backend project.

Every API route is mounted under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Dealership Back-office Admin Panel"
admin.site.site_title = "Dealership Back-office Admin Portal"
admin.site.index_title = "Welcome to the Dealership Back-office"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.locations.urls')),
    path('api/v1/', include('backend.catalog.urls')),
    path('api/v1/', include('backend.parties.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.sales.urls')),
    path('api/v1/', include('backend.current_accounts.urls')),
    path('api/v1/', include('backend.petty_cash.urls')),
    path('api/v1/', include('backend.logistics.urls')),
    path('api/v1/', include('backend.pricing.urls')),
    path('api/v1/', include('backend.payments.urls')),
    path('api/v1/', include('backend.reports.urls')),
]
