"""
core/utils.py
─────────────
Shared helpers used by the JSON views of every camp app.
Nothing here imports from an app's views (no circular imports).
"""

import json
from datetime import date
from functools import wraps

from django.http import HttpResponseNotAllowed, JsonResponse

from . import exceptions

# HTTP status per error family, most specific first.
_STATUS_BY_ERROR = (
    (exceptions.ValidationError,   400),
    (exceptions.NotFoundError,     404),
    (exceptions.ConflictError,     409),
    (exceptions.DependencyFailure, 502),
)


# ── Access control ────────────────────────────────────────────────────────────

def staff_required(*roles):
    """
    Decorator: unauthenticated users → 401, users without one of *roles*
    → 403.  With no roles, any active staff account is accepted.

    A decoded check-in token never proves identity; every endpoint that acts
    on one sits behind this decorator.
    """
    def decorator(view_fn):
        @wraps(view_fn)
        def wrapper(req, *args, **kwargs):
            if not req.user.is_authenticated:
                return JsonResponse({'error': 'authentication_required'}, status=401)
            if not req.user.is_staff:
                return JsonResponse({'error': 'staff_only'}, status=403)
            if roles and not req.user.has_camp_role(*roles):
                return JsonResponse({'error': 'forbidden'}, status=403)
            return view_fn(req, *args, **kwargs)
        return wrapper
    return decorator


def require_POST_or_405(view_fn):
    """Decorator: return 405 for any non-POST request."""
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        if req.method != 'POST':
            return HttpResponseNotAllowed(['POST'])
        return view_fn(req, *args, **kwargs)
    return wrapper


# ── Request / response helpers ────────────────────────────────────────────────

def json_body(req):
    """Parse a JSON request body, or raise ValidationError."""
    try:
        data = json.loads(req.body or b'{}')
    except (ValueError, UnicodeDecodeError):
        raise exceptions.ValidationError('Request body must be valid JSON.')
    if not isinstance(data, dict):
        raise exceptions.ValidationError('Request body must be a JSON object.')
    return data


def parse_date_param(value, field='date'):
    """Parse an optional ISO date from a query string."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise exceptions.ValidationError(f"'{field}' must be YYYY-MM-DD.", field=field)


def error_response(exc):
    """Translate a CampError into a JSON response."""
    for error_cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return JsonResponse(exc.as_dict(), status=status)
    return JsonResponse(exc.as_dict(), status=500)


def handles_camp_errors(view_fn):
    """Decorator: turn any CampError raised by a service into JSON."""
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        try:
            return view_fn(req, *args, **kwargs)
        except exceptions.CampError as exc:
            return error_response(exc)
    return wrapper
