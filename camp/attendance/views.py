"""
attendance/views.py
───────────────────
Gate endpoints.  Any staff role may check children in and out.
"""

from django.http import JsonResponse
from django.utils import timezone

from billing.serializers import action_item_as_dict
from core.utils import (
    handles_camp_errors,
    json_body,
    parse_date_param,
    require_POST_or_405,
    staff_required,
)

from . import gate, services
from .serializers import attendance_as_dict


@staff_required()
@handles_camp_errors
def attendance_list_view(req):
    """GET ?date=YYYY-MM-DD&camp_type=...  (date defaults to today)"""
    day = parse_date_param(req.GET.get('date')) or timezone.localdate()
    records = services.get_by_date(day, camp_type=req.GET.get('camp_type') or None)
    return JsonResponse({
        'date':    day.isoformat(),
        'records': [attendance_as_dict(record) for record in records],
    })


@staff_required()
@require_POST_or_405
@handles_camp_errors
def check_in_view(req):
    """POST {"registration_id": "...", "child_name": "...", "notes": "..."}"""
    data = json_body(req)
    record, action_item = gate.check_in_child(
        data.get('registration_id'),
        data.get('child_name'),
        req.user,
        notes=data.get('notes'),
    )
    return JsonResponse({
        'record':      attendance_as_dict(record),
        'action_item': action_item_as_dict(action_item) if action_item else None,
    }, status=201)


@staff_required()
@require_POST_or_405
@handles_camp_errors
def scan_view(req):
    """POST {"token": "..."}: check in every child on the scanned booking."""
    result = gate.check_in_by_token(json_body(req).get('token'), req.user)
    registration = result.registration
    return JsonResponse({
        'registration_id':     str(registration.pk),
        'registration_number': registration.registration_number,
        'payment_status':      registration.payment_status,
        'checked_in':          result.checked_in,
        'already_checked_in':  result.already_checked_in,
        'records':             [attendance_as_dict(record) for record in result.records],
        'action_items':        [action_item_as_dict(item) for item in result.action_items],
    })


@staff_required()
@require_POST_or_405
@handles_camp_errors
def check_out_view(req, attendance_id):
    record = services.check_out(attendance_id, notes=json_body(req).get('notes'))
    return JsonResponse(attendance_as_dict(record))
