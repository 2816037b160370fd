"""
billing/services.py
───────────────────
Billing escalation queue.

A gate check-in on a booking that is not fully paid lands here.  At most one
*pending* item exists per (registration, child): the partial unique
constraint on the table guarantees it, check_existing_item() only saves a
round-trip.  Billing staff are told by e-mail once the item is committed;
a failed e-mail is logged and never reaches the gate.

Functions
─────────
check_existing_item(registration_id, child_name)
escalate_unpaid_check_in(registration, child_name)
create_action_item(registration, child_name, action_type, ...)
get_action_items(...) / get_pending_items()
start_progress / mark_completed / cancel_item
mark_completed_by_registration(registration_id, staff, notes=None)
reconcile_payment(registration_id, status, staff, ...)
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from bookings import services as bookings
from communications.services import notify_billing
from core.exceptions import (
    ActionItemNotFound,
    DuplicatePendingItemError,
    InvalidChoiceError,
    InvalidTransitionError,
)

from .models import BillingActionItem

logger = logging.getLogger(__name__)

Status = BillingActionItem.Status


def _item_pk(item_id):
    try:
        return int(item_id)
    except (TypeError, ValueError):
        raise ActionItemNotFound()


def _notification_payload(item):
    return {
        'child_name':      item.child_name,
        'parent_name':     item.parent_name,
        'email':           item.email,
        'phone':           item.phone,
        'amount_due':      item.amount_due,
        'camp_type':       item.camp_type,
        'registration_id': str(item.registration_id),
    }


def _dispatch_notification(item):
    """Best effort: nothing raised here may reach the caller of check-in."""
    try:
        delivered = notify_billing(_notification_payload(item))
    except Exception:
        logger.exception(f"Billing notification crashed for action item {item.pk}")
        return
    if not delivered:
        logger.warning(f"Billing notification not delivered for action item {item.pk}")


# ── Escalation ────────────────────────────────────────────────────────────────

def check_existing_item(registration_id, child_name):
    """The pending item for this child, or None."""
    return BillingActionItem.objects.filter(
        registration_id=registration_id,
        child_name=child_name,
        status=Status.PENDING,
    ).first()


def _insert_item(registration, child_name, action_type, amount_due, notes=''):
    with transaction.atomic():
        return BillingActionItem.objects.create(
            registration=registration,
            child_name=child_name,
            parent_name=registration.parent_name,
            email=registration.email,
            phone=registration.phone,
            action_type=action_type,
            amount_due=amount_due,
            amount_paid=registration.amount_paid,
            camp_type=registration.camp_type,
            status=Status.PENDING,
            notes=notes,
        )


def escalate_unpaid_check_in(registration, child_name):
    """
    Return the child's pending ``invoice_needed`` item, creating it (and
    scheduling the billing e-mail) if there is none yet.
    """
    existing = check_existing_item(registration.pk, child_name)
    if existing is not None:
        logger.info(f"Reusing pending billing item {existing.pk} for {child_name}")
        return existing

    try:
        item = _insert_item(
            registration,
            child_name,
            BillingActionItem.ActionType.INVOICE_NEEDED,
            registration.total_amount - registration.amount_paid,
        )
    except IntegrityError:
        # A concurrent check-in inserted first; its item is the one to use.
        existing = check_existing_item(registration.pk, child_name)
        if existing is None:
            raise
        logger.info(f"Lost escalation race for {child_name}; using item {existing.pk}")
        return existing

    logger.info(
        f"Billing item {item.pk} raised: {child_name} "
        f"({registration.registration_number}) owes {item.amount_due}"
    )
    transaction.on_commit(lambda: _dispatch_notification(item))
    return item


def create_action_item(registration, child_name, action_type, amount_due=None, notes=''):
    """Manually raise an item (e.g. a receipt request)."""
    if action_type not in BillingActionItem.ActionType.values:
        raise InvalidChoiceError(f"'{action_type}' is not an action type.", field='action_type')
    if amount_due is None:
        amount_due = registration.total_amount - registration.amount_paid
    if check_existing_item(registration.pk, child_name) is not None:
        raise DuplicatePendingItemError(child_name=child_name)
    try:
        return _insert_item(registration, child_name, action_type, amount_due, notes=notes)
    except IntegrityError:
        raise DuplicatePendingItemError(child_name=child_name)


# ── Queue queries ─────────────────────────────────────────────────────────────

def get_action_items(status=None, action_type=None, registration_id=None, start=None, end=None):
    qs = BillingActionItem.objects.select_related('registration', 'completed_by')
    if status:
        qs = qs.filter(status=status)
    if action_type:
        qs = qs.filter(action_type=action_type)
    if registration_id:
        qs = qs.filter(registration_id=registration_id)
    if start:
        qs = qs.filter(created_at__date__gte=start)
    if end:
        qs = qs.filter(created_at__date__lte=end)
    return qs.order_by('-created_at')


def get_pending_items():
    return get_action_items(status=Status.PENDING)


# ── Resolution ────────────────────────────────────────────────────────────────

def _move(item_id, from_statuses, to_status, staff=None, notes=None, stamp_completion=False):
    pk = _item_pk(item_id)
    now = timezone.now()
    updates = {'status': to_status, 'updated_at': now}
    if stamp_completion:
        updates.update(completed_at=now, completed_by=staff)
    if notes:
        updates['notes'] = notes
    moved = BillingActionItem.objects.filter(pk=pk, status__in=from_statuses).update(**updates)

    try:
        item = BillingActionItem.objects.get(pk=pk)
    except BillingActionItem.DoesNotExist:
        raise ActionItemNotFound()
    if not moved:
        raise InvalidTransitionError(
            f"Billing item {pk} is {item.status}; cannot move it to {to_status}.",
            status=item.status,
        )
    logger.info(f"Billing item {pk} → {to_status}")
    return item


def start_progress(item_id, staff):
    return _move(item_id, [Status.PENDING], Status.IN_PROGRESS, staff=staff)


def mark_completed(item_id, staff, notes=None):
    """Close one open item, stamping when and by whom."""
    return _move(
        item_id, [Status.PENDING, Status.IN_PROGRESS], Status.COMPLETED,
        staff=staff, notes=notes, stamp_completion=True,
    )


def cancel_item(item_id, staff, notes=None):
    return _move(
        item_id, [Status.PENDING, Status.IN_PROGRESS], Status.CANCELLED,
        staff=staff, notes=notes, stamp_completion=True,
    )


def mark_completed_by_registration(registration_id, staff, notes=None):
    """Close every pending item of a registration; returns how many were closed."""
    now = timezone.now()
    updates = {
        'status':       Status.COMPLETED,
        'completed_at': now,
        'completed_by': staff,
        'updated_at':   now,
    }
    if notes:
        updates['notes'] = notes
    closed = BillingActionItem.objects.filter(
        registration_id=registration_id, status=Status.PENDING,
    ).update(**updates)
    logger.info(f"Closed {closed} pending billing item(s) for registration {registration_id}")
    return closed


def reconcile_payment(registration_id, status, staff, method=None, reference=None, amount_paid=None):
    """
    Record a payment on the registration; a move to ``paid`` also closes the
    registration's pending billing items.  Returns ``(registration, closed)``.
    """
    with transaction.atomic():
        registration = bookings.update_payment_status(
            registration_id, status, method=method, reference=reference, amount_paid=amount_paid,
        )
        closed = 0
        if registration.is_paid:
            closed = mark_completed_by_registration(
                registration.pk, staff, notes='Payment confirmed by admin',
            )
    return registration, closed
