"""
attendance/urls.py
──────────────────
URL patterns for the gate.
Include in the root urls.py with:
    path('attendance/', include('attendance.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('',                             views.attendance_list_view, name='attendance_list'),
    path('check-in/',                    views.check_in_view,        name='check_in'),
    path('scan/',                        views.scan_view,            name='scan'),
    path('<int:attendance_id>/check-out/', views.check_out_view,     name='check_out'),
]
