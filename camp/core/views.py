"""
core/views.py
─────────────
Sitewide endpoints: health check and the JSON error handlers registered in
the root urls.py.
"""

from django.db import connection
from django.http import JsonResponse


def health_view(req):
    """Liveness probe; also touches the database."""
    with connection.cursor() as cursor:
        cursor.execute('SELECT 1')
    return JsonResponse({'status': 'ok'})


# ── Custom error pages ────────────────────────────────────────────────────────

def handler404(req, exception):
    return JsonResponse({'error': 'not_found', 'message': 'No such endpoint.'}, status=404)


def handler500(req):
    return JsonResponse({'error': 'server_error', 'message': 'Internal server error.'}, status=500)
