"""
bookings/catalog.py
───────────────────
Read-only view of the offered camp days and their rates.

The catalog is always passed explicitly into the pricing engine; nothing in
the core reads rates from module-level state.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from django.conf import settings

from core.exceptions import InvalidSessionTypeError, UnknownDateError, ValidationError

from .models import SessionDate, SessionType


def as_date(value):
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"'{value}' is not a YYYY-MM-DD date.", value=str(value))


def as_money(value):
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"'{value}' is not an amount.", value=str(value))


class SessionCatalog:
    """
    Immutable ``{date: {session_type: rate}}`` lookup for one camp offering.
    """

    def __init__(self, rates, camp_type=None):
        self.camp_type = camp_type
        self._rates = MappingProxyType({
            as_date(day): MappingProxyType({
                'half': as_money(by_type['half']),
                'full': as_money(by_type['full']),
            })
            for day, by_type in rates.items()
        })

    @classmethod
    def from_mapping(cls, rates, camp_type=None):
        """Build from a plain mapping (external content store, tests)."""
        return cls(rates, camp_type=camp_type)

    @classmethod
    def for_camp(cls, camp_type):
        """Build from the active SessionDate rows of *camp_type*."""
        rows = SessionDate.objects.filter(camp_type=camp_type, is_active=True)
        return cls(
            {
                row.date: {
                    'half': row.half_day_rate,
                    'full': row.full_day_rate,
                }
                for row in rows
            },
            camp_type=camp_type,
        )

    def __contains__(self, day):
        try:
            return as_date(day) in self._rates
        except ValidationError:
            return False

    def __len__(self):
        return len(self._rates)

    def dates(self):
        return sorted(self._rates)

    def rate(self, day, session_type=SessionType.FULL):
        if session_type not in SessionType.values:
            raise InvalidSessionTypeError(session_type=str(session_type))
        day = as_date(day)
        try:
            by_type = self._rates[day]
        except KeyError:
            raise UnknownDateError(
                f"{day.isoformat()} is not an offered day for this camp.",
                date=day.isoformat(),
            )
        return by_type[SessionType(session_type).value]


def seed_session_dates(camp_type, dates, half_rate=None, full_rate=None):
    """
    Create (or re-activate) SessionDate rows for *camp_type*.
    Rates default to CAMP_DEFAULT_HALF_DAY_RATE / CAMP_DEFAULT_FULL_DAY_RATE.
    Returns the list of rows.
    """
    half = as_money(half_rate if half_rate is not None else settings.CAMP_DEFAULT_HALF_DAY_RATE)
    full = as_money(full_rate if full_rate is not None else settings.CAMP_DEFAULT_FULL_DAY_RATE)
    rows = []
    for day in dates:
        row, _ = SessionDate.objects.update_or_create(
            camp_type=camp_type,
            date=as_date(day),
            defaults={'half_day_rate': half, 'full_day_rate': full, 'is_active': True},
        )
        rows.append(row)
    return rows
