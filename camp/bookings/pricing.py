"""
bookings/pricing.py
───────────────────
Pricing engine: turns a child's date/session selection into money.

Every function takes the SessionCatalog as an explicit argument, so a price
depends on nothing but its inputs.
"""

from decimal import Decimal

from core.exceptions import EmptyRegistrationError, InvalidSessionTypeError

from .catalog import as_date
from .models import SessionType


def _session_type_for(day, session_type_by_date):
    """Session type chosen for *day*; ``full`` when the guardian left it unset."""
    session_type_by_date = session_type_by_date or {}
    for key in (day, day.isoformat()):
        if key in session_type_by_date:
            session_type = session_type_by_date[key] or SessionType.FULL
            if session_type not in SessionType.values:
                raise InvalidSessionTypeError(
                    f"'{session_type}' is not a session type for {day.isoformat()}.",
                    date=day.isoformat(),
                )
            return SessionType(session_type)
    return SessionType.FULL


def normalise_selection(selected_dates, session_type_by_date=None):
    """
    Canonical ``{iso_date: session_type}`` map for a selection.

    Duplicate dates collapse (set semantics), every selected date gets an
    entry, and session types for dates that are not selected are dropped.
    """
    days = sorted({as_date(day) for day in selected_dates or ()})
    return {
        day.isoformat(): _session_type_for(day, session_type_by_date).value
        for day in days
    }


def price_child(selected_dates, session_type_by_date, catalog):
    """
    Sum of ``catalog.rate(date, session_type)`` over the distinct selected
    dates.  A date missing from the catalog raises UnknownDateError.
    """
    selection = normalise_selection(selected_dates, session_type_by_date)
    return sum(
        (catalog.rate(day, session_type) for day, session_type in selection.items()),
        Decimal('0'),
    )


def price_registration(children, catalog):
    """
    Total for a registration: the sum of ``price_child`` over *children*.
    Each child needs ``selected_dates`` and ``session_types`` attributes.
    """
    children = list(children or ())
    if not children:
        raise EmptyRegistrationError()
    return sum(
        (price_child(child.selected_dates, child.session_types, catalog) for child in children),
        Decimal('0'),
    )


def reprice_date(current_price, day, old_type, new_type, catalog):
    """
    Price after switching one already-selected date from *old_type* to
    *new_type*; the other dates' contributions are left alone.
    """
    return (
        Decimal(current_price)
        - catalog.rate(day, old_type)
        + catalog.rate(day, new_type)
    )
