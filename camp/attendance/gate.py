"""
attendance/gate.py
──────────────────
The gate flow: check a child in and, when the booking is not fully paid,
escalate to the billing queue in the same transaction.
"""

import logging
from dataclasses import dataclass, field

from django.db import transaction

from billing import services as billing
from bookings import services as bookings
from bookings.models import Registration
from core.exceptions import AlreadyCheckedInError, RegistrationInactiveError

from . import services

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    registration: Registration
    checked_in: list = field(default_factory=list)
    already_checked_in: list = field(default_factory=list)
    records: list = field(default_factory=list)
    action_items: list = field(default_factory=list)


def check_in_child(registration_id, child_name, staff, notes=None):
    """
    Check *child_name* in.  Returns ``(record, action_item)``; the action item
    is None when the registration is paid.
    """
    with transaction.atomic():
        record = services.check_in(registration_id, child_name, staff, notes=notes)
        registration = record.registration
        action_item = None
        if not registration.is_paid:
            action_item = billing.escalate_unpaid_check_in(registration, child_name)
    return record, action_item


def check_in_by_token(token, staff):
    """
    Scan flow: resolve the QR token and check in every child of the booking
    who is not in yet today.  Unknown or malformed tokens raise
    RegistrationNotFound.
    """
    registration = bookings.resolve_by_token(token)
    if registration.status != Registration.Status.ACTIVE:
        raise RegistrationInactiveError(
            f"Registration {registration.registration_number} is {registration.status}.",
            status=registration.status,
        )

    result = ScanResult(registration=registration)
    for child in registration.children.all():
        if services.has_checked_in_today(registration.pk, child.child_name):
            result.already_checked_in.append(child.child_name)
            continue
        try:
            record, action_item = check_in_child(registration.pk, child.child_name, staff)
        except AlreadyCheckedInError:
            # Another station got there between the check and the insert.
            result.already_checked_in.append(child.child_name)
            continue
        result.checked_in.append(child.child_name)
        result.records.append(record)
        if action_item is not None:
            result.action_items.append(action_item)

    logger.info(
        f"Scan {registration.registration_number}: {len(result.checked_in)} checked in, "
        f"{len(result.already_checked_in)} already in"
    )
    return result
