"""
attendance/services.py
──────────────────────
Attendance tracker: check-in / check-out and the read-only attendance views.

The pre-check in check_in() only exists to give a friendly error early.  The
unique constraint on (registration, child_name, attendance_date) is what
actually stops two gate stations from checking the same child in twice.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from bookings import services as bookings
from bookings.models import Registration
from core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    AttendanceNotFound,
    ChildNotFound,
    RegistrationInactiveError,
)

from .models import AttendanceRecord

logger = logging.getLogger(__name__)


def _attendance_pk(attendance_id):
    try:
        return int(attendance_id)
    except (TypeError, ValueError):
        raise AttendanceNotFound()


def _with_context(qs):
    return qs.select_related('registration', 'marked_by')


# ── State machine ─────────────────────────────────────────────────────────────

def has_checked_in_today(registration_id, child_name, on=None):
    """The child's record for *on* (default: today), or None."""
    day = on or timezone.localdate()
    return AttendanceRecord.objects.filter(
        registration_id=registration_id,
        child_name=child_name,
        attendance_date=day,
    ).first()


def check_in(registration_id, child_name, marked_by, notes=None, on=None):
    """
    Create today's attendance record for *child_name*.

    Raises RegistrationNotFound / ChildNotFound for unknown targets,
    RegistrationInactiveError for cancelled or completed bookings and
    AlreadyCheckedInError when a record for the day already exists.
    """
    registration = bookings.get_by_id(registration_id)
    if registration.status != Registration.Status.ACTIVE:
        raise RegistrationInactiveError(
            f"Registration {registration.registration_number} is {registration.status}.",
            status=registration.status,
        )
    if not registration.children.filter(child_name=child_name).exists():
        raise ChildNotFound(
            f"{child_name} is not on registration {registration.registration_number}.",
        )

    day = on or timezone.localdate()
    duplicate = AlreadyCheckedInError(
        f"{child_name} is already checked in for {day.isoformat()}.",
        child_name=child_name,
        date=day.isoformat(),
    )
    if has_checked_in_today(registration.pk, child_name, on=day):
        raise duplicate

    try:
        with transaction.atomic():
            record = AttendanceRecord.objects.create(
                registration=registration,
                child_name=child_name,
                attendance_date=day,
                check_in_time=timezone.now(),
                marked_by=marked_by,
                notes=notes or '',
            )
    except IntegrityError:
        logger.warning(
            f"Concurrent check-in rejected by storage: {registration.registration_number} "
            f"/ {child_name} / {day.isoformat()}"
        )
        raise duplicate

    logger.info(f"Checked in {child_name} ({registration.registration_number}) on {day.isoformat()}")
    return record


def check_out(attendance_id, notes=None):
    """
    Stamp ``check_out_time`` on an open record.  A record that is already
    checked out raises AlreadyCheckedOutError; its timestamp is left alone.
    """
    pk = _attendance_pk(attendance_id)
    updates = {'check_out_time': timezone.now()}
    if notes:
        updates['notes'] = notes
    moved = AttendanceRecord.objects.filter(pk=pk, check_out_time__isnull=True).update(**updates)

    try:
        record = _with_context(AttendanceRecord.objects).get(pk=pk)
    except AttendanceRecord.DoesNotExist:
        raise AttendanceNotFound()
    if not moved:
        raise AlreadyCheckedOutError(
            f"{record.child_name} was already checked out at {record.check_out_time.isoformat()}.",
            attendance_id=pk,
        )

    logger.info(f"Checked out {record.child_name} ({record.registration.registration_number})")
    return record


# ── Read-only queries ─────────────────────────────────────────────────────────

def get_by_date(day, camp_type=None):
    qs = _with_context(AttendanceRecord.objects.filter(attendance_date=day))
    if camp_type:
        qs = qs.filter(registration__camp_type=camp_type)
    return qs.order_by('check_in_time')


def get_todays_attendance(camp_type=None):
    return get_by_date(timezone.localdate(), camp_type=camp_type)


def get_by_registration(registration_id):
    return (
        _with_context(AttendanceRecord.objects.filter(registration_id=registration_id))
        .order_by('-attendance_date', 'child_name')
    )


def get_summary(camp_type=None, start=None, end=None):
    """
    Per-day counts: children checked in, checked out, still on site, and
    how many of them belong to paid / not-yet-paid registrations.
    """
    qs = AttendanceRecord.objects.all()
    if camp_type:
        qs = qs.filter(registration__camp_type=camp_type)
    if start:
        qs = qs.filter(attendance_date__gte=start)
    if end:
        qs = qs.filter(attendance_date__lte=end)

    rows = (
        qs.values('attendance_date')
        .annotate(
            checked_in=Count('id'),
            checked_out=Count('id', filter=Q(check_out_time__isnull=False)),
            paid=Count('id', filter=Q(registration__payment_status=Registration.PaymentStatus.PAID)),
        )
        .order_by('attendance_date')
    )
    return [
        {
            'date':        row['attendance_date'],
            'checked_in':  row['checked_in'],
            'checked_out': row['checked_out'],
            'present':     row['checked_in'] - row['checked_out'],
            'paid':        row['paid'],
            'unpaid':      row['checked_in'] - row['paid'],
        }
        for row in rows
    ]
