"""
billing/models.py
─────────────────
BillingActionItem – a follow-up for the accounts team, raised when a child
                    is checked in at the gate before the booking is paid.

The guardian's contact details are copied onto the item so billing staff can
act on it even if the registration is later cancelled.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from bookings.models import CampType


class BillingActionItem(models.Model):

    class ActionType(models.TextChoices):
        INVOICE_NEEDED   = 'invoice_needed',   'Invoice needed'
        RECEIPT_NEEDED   = 'receipt_needed',   'Receipt needed'
        PAYMENT_FOLLOWUP = 'payment_followup', 'Payment follow-up'

    class Status(models.TextChoices):
        PENDING     = 'pending',     'Pending'
        IN_PROGRESS = 'in_progress', 'In progress'
        COMPLETED   = 'completed',   'Completed'
        CANCELLED   = 'cancelled',   'Cancelled'

    registration = models.ForeignKey(
        'bookings.Registration',
        on_delete=models.PROTECT,
        related_name='billing_items',
    )
    registration_type = models.CharField(
        max_length=30,
        default='camp',
        help_text='Which kind of booking raised the item.',
    )
    child_name = models.CharField(max_length=200)

    # Guardian snapshot
    parent_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=40, blank=True)

    action_type = models.CharField(
        max_length=30,
        choices=ActionType.choices,
        default=ActionType.INVOICE_NEEDED,
    )
    amount_due = models.DecimalField(max_digits=10, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    camp_type = models.CharField(max_length=30, choices=CampType.choices, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    notes = models.TextField(blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='completed_billing_items',
        help_text='Billing staff member who resolved the item.',
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Billing Action Item'
        verbose_name_plural = 'Billing Action Items'
        constraints = [
            models.UniqueConstraint(
                fields=['registration', 'child_name'],
                condition=Q(status='pending'),
                name='unique_pending_billing_item_per_child',
            ),
        ]

    def __str__(self):
        return (
            f"{self.get_action_type_display()}: {self.child_name} "
            f"({self.amount_due} {settings.CAMP_CURRENCY}, {self.get_status_display()})"
        )

    @property
    def is_open(self):
        return self.status in (self.Status.PENDING, self.Status.IN_PROGRESS)
