"""
accounts/urls.py
────────────────
URL patterns for staff session authentication.
Include in the root urls.py with:
    path('accounts/', include('accounts.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('login/',  views.login_view,  name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('me/',     views.me_view,     name='me'),
]
