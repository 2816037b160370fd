"""
core/testing.py
───────────────
Fixtures shared by the app test modules.  Not imported by runtime code.
"""

from datetime import date, timedelta

from django.contrib.auth import get_user_model

from bookings.catalog import seed_session_dates
from bookings.models import CampType
from bookings.services import ChildDraft, RegistrationDraft, create_registration

User = get_user_model()

CAMP_START = date(2026, 7, 6)
CAMP_DAYS = [CAMP_START + timedelta(days=offset) for offset in range(5)]


def make_staff(username='gate1', role=User.Role.GATE, **extra):
    return User.objects.create_user(
        username=username,
        password='pass12345',
        is_staff=True,
        role=role,
        **extra,
    )


def seed_summer_camp():
    """Five summer days at the default 1500 / 2500 rates."""
    return seed_session_dates(CampType.SUMMER, CAMP_DAYS, half_rate='1500', full_rate='2500')


def child_draft(name='Amani', dates=None, session_types=None, **extra):
    return ChildDraft(
        child_name=name,
        date_of_birth=extra.pop('date_of_birth', date(2018, 3, 14)),
        selected_dates=list(dates if dates is not None else CAMP_DAYS[:2]),
        session_types=dict(session_types or {}),
        **extra,
    )


def registration_draft(children=None, **extra):
    fields = {
        'camp_type':     CampType.SUMMER,
        'parent_name':   'Wanjiru Kamau',
        'email':         'wanjiru@example.com',
        'phone':         '+254700000001',
        'children':      children if children is not None else [child_draft()],
        'consent_given': True,
    }
    fields.update(extra)
    return RegistrationDraft(**fields)


def make_registration(children=None, **extra):
    return create_registration(registration_draft(children=children, **extra))
