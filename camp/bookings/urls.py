"""
bookings/urls.py
────────────────
URL patterns for the registration store.
Include in the root urls.py with:
    path('bookings/', include('bookings.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('registrations/',                               views.create_registration_view,  name='create_registration'),
    path('registrations/search/',                        views.search_registrations_view, name='search_registrations'),
    path('registrations/<uuid:registration_id>/',        views.registration_detail_view,  name='registration_detail'),
    path('registrations/<uuid:registration_id>/cancel/', views.cancel_registration_view,  name='cancel_registration'),
    path('registrations/<uuid:registration_id>/notes/',  views.add_note_view,             name='add_registration_note'),
    path('resolve/',                                     views.resolve_token_view,        name='resolve_token'),
]
