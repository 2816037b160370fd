"""
billing/urls.py
───────────────
URL patterns for the billing queue.
Include in the root urls.py with:
    path('billing/', include('billing.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('registrations/<uuid:registration_id>/payment/', views.reconcile_payment_view,    name='reconcile_payment'),
    path('items/',                                        views.action_items_view,         name='action_items'),
    path('items/<int:item_id>/complete/',                 views.complete_action_item_view, name='complete_action_item'),
]
