"""
communications/services.py
──────────────────────────
Service functions for sending camp emails.

These are called by billing/ and bookings/ after their transaction commits,
keeping all "talk to the outside world" logic in one place.  Nothing here
raises on a transport failure: every attempt is logged to NotificationLog
and the function returns True or False.

Functions
─────────
notify_billing(payload)
    Alert billing staff that a child was checked in before the booking was
    paid.  *payload* carries child_name, parent_name, email, phone,
    amount_due, camp_type and registration_id.

send_registration_confirmation(registration)
    Send the guardian a summary of a new booking.
"""

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils import timezone

from .models import NotificationLog

logger = logging.getLogger(__name__)


def _log(recipients, notification_type, subject, body, registration_id=None,
         success=True, error=''):
    """Internal helper to persist a NotificationLog entry."""
    NotificationLog.objects.create(
        recipients=', '.join(recipients),
        notification_type=notification_type,
        channel=NotificationLog.Channel.EMAIL,
        subject=subject,
        body_preview=body[:500],
        registration_id=registration_id,
        sent_at=timezone.now(),
        success=success,
        error_message=error,
    )


def _send(recipients, notification_type, subject, body, registration_id=None):
    if not recipients:
        _log(recipients, notification_type, subject, body, registration_id,
             success=False, error='No recipients configured.')
        logger.warning(f"{notification_type} not sent: no recipients configured")
        return False

    try:
        send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=recipients,
            fail_silently=False,
        )
    except Exception as exc:
        _log(recipients, notification_type, subject, body, registration_id,
             success=False, error=str(exc))
        logger.warning(f"{notification_type} to {', '.join(recipients)} failed: {exc}")
        return False

    _log(recipients, notification_type, subject, body, registration_id)
    logger.info(f"{notification_type} sent to {', '.join(recipients)}")
    return True


def _camp_label(camp_type):
    return (camp_type or '').replace('-', ' ').title()


def notify_billing(payload):
    """
    Email CAMP_BILLING_NOTIFY_EMAILS about an unpaid check-in.
    Returns True on success, False on failure.
    """
    currency = settings.CAMP_CURRENCY
    subject = f"Unpaid check-in: {payload['child_name']} - {payload['amount_due']} {currency}"
    context = {
        'child_name':       payload['child_name'],
        'parent_name':      payload['parent_name'],
        'email':            payload.get('email', ''),
        'phone':            payload.get('phone', ''),
        'amount_due':       payload['amount_due'],
        'camp_label':       _camp_label(payload.get('camp_type')),
        'currency':         currency,
        'registration_url': (
            f"{settings.SITE_URL}/admin/bookings/registration/{payload['registration_id']}/change/"
        ),
    }
    body = render_to_string('communications/email/billing_alert.txt', context)
    return _send(
        list(settings.CAMP_BILLING_NOTIFY_EMAILS),
        NotificationLog.NotificationType.BILLING_ALERT,
        subject,
        body,
        registration_id=payload.get('registration_id'),
    )


def send_registration_confirmation(registration):
    """
    Send the guardian the registration number, children, dates and total.
    Returns True on success, False on failure.
    """
    subject = f"Camp registration confirmed: {registration.registration_number}"
    context = {
        'registration': registration,
        'children':     list(registration.children.all()),
        'camp_label':   _camp_label(registration.camp_type),
        'currency':     settings.CAMP_CURRENCY,
    }
    body = render_to_string('communications/email/registration_confirmation.txt', context)
    return _send(
        [registration.email] if registration.email else [],
        NotificationLog.NotificationType.REGISTRATION_CONFIRMATION,
        subject,
        body,
        registration_id=registration.pk,
    )
