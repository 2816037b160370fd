"""
bookings/views.py
─────────────────
Staff JSON endpoints for the registration store.

SECURITY: the identity token is not a credential.  Every endpoint here sits
behind staff_required, including token resolution.
"""

from django.http import JsonResponse

from accounts.models import CustomUser
from core.utils import handles_camp_errors, json_body, require_POST_or_405, staff_required

from . import services
from .qr import render_qr_png
from .serializers import registration_as_dict

ADMIN = CustomUser.Role.ADMIN
SEARCH_LIMIT = 100


@staff_required(ADMIN)
@require_POST_or_405
@handles_camp_errors
def create_registration_view(req):
    """POST: ground registration taken by camp staff."""
    draft = services.RegistrationDraft.from_dict(json_body(req))
    registration = services.create_registration(draft, created_by=req.user)
    return JsonResponse(registration_as_dict(registration), status=201)


@staff_required()
@handles_camp_errors
def registration_detail_view(req, registration_id):
    registration = services.get_by_id(registration_id)
    data = registration_as_dict(registration)
    data['identity_token'] = registration.identity_token
    data['qr_png_base64'] = render_qr_png(registration.identity_token)
    return JsonResponse(data)


@staff_required(ADMIN)
@require_POST_or_405
@handles_camp_errors
def cancel_registration_view(req, registration_id):
    registration = services.cancel(registration_id)
    return JsonResponse(registration_as_dict(registration, include_children=False))


@staff_required()
@require_POST_or_405
@handles_camp_errors
def resolve_token_view(req):
    """POST {"token": "..."}: look up the registration behind a scanned code."""
    registration = services.resolve_by_token(json_body(req).get('token'))
    return JsonResponse(registration_as_dict(registration))


@staff_required()
@handles_camp_errors
def search_registrations_view(req):
    """GET ?q=...: match on number, parent name, e-mail or phone."""
    term = req.GET.get('q', '')
    if term.strip():
        registrations = services.search_registrations(term)
    else:
        registrations = services.list_registrations(
            camp_type=req.GET.get('camp_type') or None,
            payment_status=req.GET.get('payment_status') or None,
            status=req.GET.get('status') or None,
        )
    return JsonResponse({
        'registrations': [
            registration_as_dict(registration, include_children=False)
            for registration in registrations[:SEARCH_LIMIT]
        ],
    })


@staff_required(ADMIN)
@require_POST_or_405
@handles_camp_errors
def add_note_view(req, registration_id):
    registration = services.add_admin_note(registration_id, json_body(req).get('note'))
    return JsonResponse({'id': str(registration.pk), 'admin_notes': registration.admin_notes})
