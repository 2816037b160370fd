"""
bookings/models.py
──────────────────
The booking side of the camp: what is on offer and who booked it.

SessionDate  – one offered calendar day of a camp, with its half/full rate.
Registration – one guardian's booking (never deleted, only status-moved).
Child        – a child inside a Registration, with its per-date session map.
"""

import uuid
from datetime import date
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class CampType(models.TextChoices):
    EASTER             = 'easter',             'Easter Camp'
    SUMMER             = 'summer',             'Summer Camp'
    END_YEAR           = 'end-year',           'End Year Camp'
    MID_TERM_1         = 'mid-term-1',         'Mid-Term Camp 1'
    MID_TERM_2         = 'mid-term-2',         'Mid-Term Camp 2'
    MID_TERM_3         = 'mid-term-3',         'Mid-Term Camp 3'
    MID_TERM_OCTOBER   = 'mid-term-october',   'Mid-Term Camp – October'
    MID_TERM_FEB_MARCH = 'mid-term-feb-march', 'Mid-Term Camp – Feb/March'
    DAY_CAMPS          = 'day-camps',          'Day Camps'
    LITTLE_FOREST      = 'little-forest',      'Little Forest'


class SessionType(models.TextChoices):
    HALF = 'half', 'Half Day (8AM-12PM)'
    FULL = 'full', 'Full Day (8AM-5PM)'


class SessionDate(models.Model):
    """
    A calendar day a camp offering runs on, with the rate for each session
    type.  Maintained by the camp office; the pricing engine only reads it.
    """

    camp_type = models.CharField(max_length=30, choices=CampType.choices)
    date = models.DateField()
    half_day_rate = models.DecimalField(max_digits=10, decimal_places=2)
    full_day_rate = models.DecimalField(max_digits=10, decimal_places=2)
    is_active = models.BooleanField(
        default=True,
        help_text='Inactive dates disappear from the catalog used for pricing.',
    )

    class Meta:
        ordering = ['camp_type', 'date']
        verbose_name = 'Session Date'
        verbose_name_plural = 'Session Dates'
        constraints = [
            models.UniqueConstraint(
                fields=['camp_type', 'date'],
                name='unique_session_date_per_camp',
            ),
        ]

    def __str__(self):
        return f"{self.get_camp_type_display()} – {self.date.isoformat()}"


class Registration(models.Model):
    """
    One guardian's booking for one or more children on one or more days.

    Only the payment fields change after creation (payment reconciliation);
    ``status`` moves to cancelled/completed administratively.  There is no
    delete path: attendance and billing rows keep pointing here for audit.
    """

    class PaymentStatus(models.TextChoices):
        UNPAID  = 'unpaid',  'Unpaid'
        PARTIAL = 'partial', 'Partially paid'
        PAID    = 'paid',    'Paid'

    class PaymentMethod(models.TextChoices):
        PENDING      = 'pending',      'Pending'
        CARD         = 'card',         'Card'
        MOBILE_MONEY = 'mobile_money', 'Mobile Money'
        CASH_ON_SITE = 'cash_on_site', 'Cash on site'

    class RegistrationType(models.TextChoices):
        ONLINE_ONLY         = 'online_only',         'Online (pay later)'
        ONLINE_PAID         = 'online_paid',         'Online (paid)'
        GROUND_REGISTRATION = 'ground_registration', 'Ground registration'

    class Status(models.TextChoices):
        ACTIVE    = 'active',    'Active'
        CANCELLED = 'cancelled', 'Cancelled'
        COMPLETED = 'completed', 'Completed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    registration_number = models.CharField(
        max_length=32,
        unique=True,
        editable=False,
        help_text='Human-facing reference quoted by guardians and staff.',
    )
    camp_type = models.CharField(max_length=30, choices=CampType.choices)

    # Guardian contact
    parent_name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=40)
    emergency_contact = models.CharField(max_length=200, blank=True)

    # Money
    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text='Sum of the children prices, fixed at creation.',
    )
    amount_paid = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0'),
        help_text='Amount received so far, as recorded by payment reconciliation.',
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.PENDING,
    )
    payment_reference = models.CharField(max_length=100, blank=True)
    registration_type = models.CharField(
        max_length=30,
        choices=RegistrationType.choices,
        default=RegistrationType.ONLINE_ONLY,
    )

    identity_token = models.CharField(
        max_length=255,
        unique=True,
        editable=False,
        help_text='Opaque check-in token printed as a QR code.',
    )
    consent_given = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    admin_notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_registrations',
        help_text='Staff member who took a ground registration (empty for online).',
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Registration'
        verbose_name_plural = 'Registrations'

    def __str__(self):
        return f"{self.registration_number} – {self.parent_name} ({self.get_camp_type_display()})"

    @property
    def is_paid(self):
        return self.payment_status == self.PaymentStatus.PAID

    @property
    def amount_outstanding(self):
        """What the guardian still owes; never negative."""
        return max(self.total_amount - self.amount_paid, Decimal('0'))

    def get_child(self, child_name):
        return self.children.filter(child_name=child_name).first()


class Child(models.Model):
    """
    A child booked under a Registration.

    ``session_types`` maps ISO dates to ``half``/``full``; its keys *are* the
    selected dates, so the two can never drift apart.
    """

    registration = models.ForeignKey(
        Registration,
        on_delete=models.CASCADE,
        related_name='children',
    )
    position = models.PositiveSmallIntegerField(default=0)
    child_name = models.CharField(max_length=200)
    date_of_birth = models.DateField()
    age_range = models.CharField(max_length=50, blank=True)
    special_needs = models.TextField(blank=True)
    session_types = models.JSONField(default=dict)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ['registration', 'position']
        verbose_name = 'Child'
        verbose_name_plural = 'Children'
        constraints = [
            models.UniqueConstraint(
                fields=['registration', 'child_name'],
                name='unique_child_name_per_registration',
            ),
        ]

    def __str__(self):
        return f"{self.child_name} ({self.registration.registration_number})"

    @property
    def selected_dates(self):
        return [date.fromisoformat(day) for day in sorted(self.session_types)]
