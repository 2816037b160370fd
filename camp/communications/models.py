"""
communications/models.py
─────────────────────────
Models for outbound communication tracking.

NotificationLog – records every automated email sent by the camp system,
                  so billing staff can see when an alert went out (or why
                  it did not).
"""

from django.db import models
from django.utils import timezone


class NotificationLog(models.Model):
    """
    One row per send attempt.  A failed SMTP call still leaves a row with
    ``success=False`` and the error text.
    """

    class NotificationType(models.TextChoices):
        BILLING_ALERT             = 'billing_alert',             'Billing Alert'
        REGISTRATION_CONFIRMATION = 'registration_confirmation', 'Registration Confirmation'
        CUSTOM                    = 'custom',                    'Custom Message'

    class Channel(models.TextChoices):
        EMAIL = 'email', 'Email'
        SMS   = 'sms',   'SMS'

    notification_type = models.CharField(
        max_length=30,
        choices=NotificationType.choices,
        default=NotificationType.BILLING_ALERT,
    )
    channel = models.CharField(
        max_length=10,
        choices=Channel.choices,
        default=Channel.EMAIL,
    )
    recipients = models.TextField(
        blank=True,
        help_text='Comma-separated addresses the message was sent to.',
    )
    subject = models.CharField(max_length=255, blank=True)
    body_preview = models.TextField(
        blank=True,
        help_text='First 500 characters of the message body (for the audit log).',
    )
    registration = models.ForeignKey(
        'bookings.Registration',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
        help_text='The registration this message is about (if applicable).',
    )
    sent_at = models.DateTimeField(default=timezone.now)
    success = models.BooleanField(
        default=True,
        help_text='False if the send attempt failed (e.g. SMTP error).',
    )
    error_message = models.TextField(blank=True)

    class Meta:
        ordering = ['-sent_at']
        verbose_name = 'Notification Log'
        verbose_name_plural = 'Notification Logs'

    def __str__(self):
        return (
            f"[{self.get_notification_type_display()}] "
            f"→ {self.recipients or 'nobody'} "
            f"({self.sent_at.strftime('%Y-%m-%d %H:%M')})"
        )
