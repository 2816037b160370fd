"""
reports/urls.py
───────────────
URL patterns for reporting / export.
Include in the root urls.py with:
    path('reports/', include('reports.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('summary/',        views.summary_view,         name='report_summary'),
    path('export.csv',      views.export_csv_view,      name='export_csv'),
    path('qr-codes.zip',    views.export_qr_codes_view, name='export_qr_codes'),
]
