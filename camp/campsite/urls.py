"""
URL configuration for the camp project.

── Routing ────────────────────────────────────────────────────────────────────
  admin/            Django admin (back office)
  health/           liveness probe
  accounts/         staff session login / logout
  bookings/         registrations, token resolution
  attendance/       gate check-in / check-out
  billing/          payment reconciliation, billing action items
  communications/   notification log
  reports/          revenue summary, CSV export
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('core.urls')),
    path('accounts/', include('accounts.urls')),
    path('bookings/', include('bookings.urls')),
    path('attendance/', include('attendance.urls')),
    path('billing/', include('billing.urls')),
    path('communications/', include('communications.urls')),
    path('reports/', include('reports.urls')),
]

handler404 = 'core.views.handler404'
handler500 = 'core.views.handler500'
