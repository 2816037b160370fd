"""
accounts/views.py
─────────────────
Session authentication for gate stations and back-office clients:
login, logout, and "who am I".

GET /accounts/me/ also sets the CSRF cookie the client must echo back on
every POST.
"""

import logging

from django.contrib.auth import authenticate, login, logout
from django.http import JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie

from core.utils import handles_camp_errors, json_body, require_POST_or_405

logger = logging.getLogger(__name__)


def _user_as_dict(user):
    return {
        'username':  user.username,
        'full_name': user.get_full_name(),
        'role':      user.role,
        'is_staff':  user.is_staff,
    }


# ── Login / Logout ────────────────────────────────────────────────────────────

@require_POST_or_405
@handles_camp_errors
def login_view(req):
    """POST {"username": "...", "password": "..."}; staff accounts only."""
    data = json_body(req)
    username = str(data.get('username') or '').strip()
    user = authenticate(req, username=username, password=data.get('password') or '')
    if user is None or not user.is_staff:
        logger.warning(f"Failed staff login for '{username}'")
        return JsonResponse(
            {'error': 'invalid_credentials', 'message': 'Invalid username or password.'},
            status=401,
        )
    login(req, user)
    logger.info(f"Staff login: {user.username} ({user.role})")
    return JsonResponse(_user_as_dict(user))


@require_POST_or_405
def logout_view(req):
    """Log the current user out; POST only for CSRF safety."""
    logout(req)
    return JsonResponse({'status': 'logged_out'})


@ensure_csrf_cookie
def me_view(req):
    if not req.user.is_authenticated:
        return JsonResponse({'error': 'authentication_required'}, status=401)
    return JsonResponse(_user_as_dict(req.user))
