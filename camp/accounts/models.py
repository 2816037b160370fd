"""
accounts/models.py
──────────────────
Staff identity.

CustomUser – extends AbstractUser with a camp role.  Guardians never log in;
             every account here is a member of staff whose id ends up in
             ``marked_by`` / ``completed_by`` / ``created_by`` audit fields.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """
    Custom user model for camp staff.

    Roles
    -----
    ADMIN     – camp office: registrations, cancellations, reports.
    GATE      – gate station staff: check-in / check-out only.
    ACCOUNTS  – billing staff: works the billing action queue.
    """

    class Role(models.TextChoices):
        ADMIN    = 'admin',    'Camp Admin'
        GATE     = 'gate',     'Gate Staff'
        ACCOUNTS = 'accounts', 'Accounts / Billing'

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.GATE,
        verbose_name='Role',
        help_text='Decides which camp operations this staff member may perform.',
    )

    def has_camp_role(self, *roles):
        """Superusers hold every role."""
        return self.is_superuser or self.role in roles

    def __str__(self):
        return f"{self.get_full_name() or self.username} ({self.get_role_display()})"

    class Meta:
        verbose_name = 'Staff User'
        verbose_name_plural = 'Staff Users'
