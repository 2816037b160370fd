"""
billing/views.py
────────────────
JSON endpoints for the accounts team: payment reconciliation and the
billing action-item queue.
"""

from django.http import JsonResponse

from accounts.models import CustomUser
from bookings.serializers import registration_as_dict
from core.exceptions import InvalidChoiceError
from core.utils import (
    handles_camp_errors,
    json_body,
    parse_date_param,
    require_POST_or_405,
    staff_required,
)

from . import services
from .models import BillingActionItem
from .serializers import action_item_as_dict

BILLING_ROLES = (CustomUser.Role.ADMIN, CustomUser.Role.ACCOUNTS)


@staff_required(*BILLING_ROLES)
@require_POST_or_405
@handles_camp_errors
def reconcile_payment_view(req, registration_id):
    """
    POST {"payment_status": "paid", "payment_method": "...",
          "payment_reference": "...", "amount_paid": "..."}
    """
    data = json_body(req)
    registration, closed = services.reconcile_payment(
        registration_id,
        data.get('payment_status'),
        req.user,
        method=data.get('payment_method'),
        reference=data.get('payment_reference'),
        amount_paid=data.get('amount_paid'),
    )
    payload = registration_as_dict(registration, include_children=False)
    payload['closed_action_items'] = closed
    return JsonResponse(payload)


@staff_required(*BILLING_ROLES)
@handles_camp_errors
def action_items_view(req):
    status = req.GET.get('status') or None
    if status and status not in BillingActionItem.Status.values:
        raise InvalidChoiceError(f"'{status}' is not an action item status.", field='status')
    items = services.get_action_items(
        status=status,
        action_type=req.GET.get('action_type') or None,
        start=parse_date_param(req.GET.get('start'), 'start'),
        end=parse_date_param(req.GET.get('end'), 'end'),
    )
    return JsonResponse({'items': [action_item_as_dict(item) for item in items]})


@staff_required(*BILLING_ROLES)
@require_POST_or_405
@handles_camp_errors
def complete_action_item_view(req, item_id):
    item = services.mark_completed(item_id, req.user, notes=json_body(req).get('notes'))
    return JsonResponse(action_item_as_dict(item))
