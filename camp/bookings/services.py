"""
bookings/services.py
────────────────────
Registration store: the only way registrations are created, looked up and
moved between states.

Functions
─────────
create_registration(draft, catalog=None, created_by=None)
    Validate, price and persist a registration with its children.

get_by_id(registration_id) / get_by_number(number) / resolve_by_token(token)
    Lookups; all raise RegistrationNotFound, never leak parse errors.

update_payment_status(registration_id, status, method, reference, amount_paid)
    Record payment state.  Never re-prices.

cancel(registration_id) / complete(registration_id)
    Administrative status moves.  Nothing is ever deleted.

add_admin_note / list_registrations / search_registrations
    Back-office helpers.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from communications.services import send_registration_confirmation
from core.exceptions import (
    ConsentRequiredError,
    DuplicateChildError,
    EmptyRegistrationError,
    InvalidChoiceError,
    InvalidTransitionError,
    RegistrationNotFound,
    ValidationError,
)

from . import tokens
from .catalog import SessionCatalog, as_date, as_money
from .models import CampType, Child, Registration
from .pricing import normalise_selection, price_child

logger = logging.getLogger(__name__)

NUMBER_ATTEMPTS = 5


# ── Drafts (caller input) ─────────────────────────────────────────────────────

def _pick(data, snake, camel, default=''):
    value = data.get(snake, data.get(camel))
    return default if value is None else value


@dataclass
class ChildDraft:
    child_name: str
    date_of_birth: object
    selected_dates: list
    session_types: dict = field(default_factory=dict)
    age_range: str = ''
    special_needs: str = ''

    @classmethod
    def from_dict(cls, data):
        selected_dates = _pick(data, 'selected_dates', 'selectedDates', [])
        if not isinstance(selected_dates, list):
            raise ValidationError("'selected_dates' must be a list of dates.", field='selected_dates')
        session_types = _pick(data, 'session_types', 'sessionTypeByDate', {})
        if not isinstance(session_types, dict):
            raise ValidationError("'session_types' must be an object.", field='session_types')
        return cls(
            child_name=_pick(data, 'child_name', 'childName'),
            date_of_birth=_pick(data, 'date_of_birth', 'dateOfBirth', None),
            selected_dates=list(selected_dates),
            session_types=dict(session_types),
            age_range=_pick(data, 'age_range', 'ageRange'),
            special_needs=_pick(data, 'special_needs', 'specialNeeds'),
        )


@dataclass
class RegistrationDraft:
    camp_type: str
    parent_name: str
    email: str
    phone: str
    children: list
    consent_given: bool = False
    emergency_contact: str = ''
    registration_type: str = Registration.RegistrationType.ONLINE_ONLY
    payment_status: str = Registration.PaymentStatus.UNPAID
    payment_method: str = Registration.PaymentMethod.PENDING
    payment_reference: str = ''
    admin_notes: str = ''

    @classmethod
    def from_dict(cls, data):
        """Build a draft from a decoded JSON body (snake_case or camelCase keys)."""
        children = data.get('children') or []
        if not isinstance(children, list) or not all(isinstance(c, dict) for c in children):
            raise ValidationError("'children' must be a list of objects.", field='children')
        return cls(
            camp_type=_pick(data, 'camp_type', 'campType'),
            parent_name=_pick(data, 'parent_name', 'parentName'),
            email=_pick(data, 'email', 'email'),
            phone=_pick(data, 'phone', 'phone'),
            children=[ChildDraft.from_dict(child) for child in children],
            consent_given=_pick(data, 'consent_given', 'consentGiven', False) is True,
            emergency_contact=_pick(data, 'emergency_contact', 'emergencyContact'),
            registration_type=_pick(data, 'registration_type', 'registrationType',
                                    Registration.RegistrationType.ONLINE_ONLY),
            payment_status=_pick(data, 'payment_status', 'paymentStatus',
                                 Registration.PaymentStatus.UNPAID),
            payment_method=_pick(data, 'payment_method', 'paymentMethod',
                                 Registration.PaymentMethod.PENDING),
            payment_reference=_pick(data, 'payment_reference', 'paymentReference'),
            admin_notes=_pick(data, 'admin_notes', 'adminNotes'),
        )


# ── Internal helpers ──────────────────────────────────────────────────────────

def _check_choice(choices, value, field_name):
    if value not in choices.values:
        raise InvalidChoiceError(
            f"'{value}' is not a valid {field_name}.", field=field_name,
        )
    return choices(value)


def _as_uuid(registration_id):
    if isinstance(registration_id, uuid.UUID):
        return registration_id
    try:
        return uuid.UUID(str(registration_id))
    except (ValueError, TypeError, AttributeError):
        raise RegistrationNotFound()


def _new_registration_number(created_at):
    """``<PREFIX>-<YEAR>-<6 hex>``, retried until unused."""
    prefix = settings.CAMP_REGISTRATION_NUMBER_PREFIX
    while True:
        number = f"{prefix}-{created_at:%Y}-{secrets.token_hex(3).upper()}"
        if not Registration.objects.filter(registration_number=number).exists():
            return number


def _save_with_unique_number(registration, created_at):
    """
    Insert *registration* under a fresh number.  A concurrent create can take
    the same number between the check and the insert; the unique index
    rejects it and a new number is drawn.
    """
    for attempt in range(1, NUMBER_ATTEMPTS + 1):
        registration.registration_number = _new_registration_number(created_at)
        try:
            with transaction.atomic():
                registration.save(force_insert=True)
            return
        except IntegrityError:
            if attempt == NUMBER_ATTEMPTS:
                raise
            logger.warning(
                f"Registration number {registration.registration_number} taken "
                f"concurrently; drawing another"
            )


def _text(obj, field_name):
    """A draft's text field; anything but a string (or unset) is rejected."""
    value = getattr(obj, field_name)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f"'{field_name}' must be text.", field=field_name)
    return value


def _validate_draft(draft):
    if draft.consent_given is not True:
        raise ConsentRequiredError()

    children = list(draft.children or [])
    if not children or any(not child.selected_dates for child in children):
        raise EmptyRegistrationError()

    for field_name in ('parent_name', 'email', 'phone'):
        if not _text(draft, field_name).strip():
            raise ValidationError(f"'{field_name}' is required.", field=field_name)
    for field_name in ('emergency_contact', 'payment_reference', 'admin_notes'):
        _text(draft, field_name)

    for child in children:
        for field_name in ('age_range', 'special_needs'):
            _text(child, field_name)
        if not isinstance(child.session_types, dict):
            raise ValidationError("'session_types' must be an object.", field='session_types')
    names = [_text(child, 'child_name').strip() for child in children]
    if not all(names):
        raise ValidationError('Every child needs a name.', field='child_name')
    if len(set(names)) != len(names):
        raise DuplicateChildError()
    for child in children:
        if not child.date_of_birth:
            raise ValidationError(
                f"Date of birth is required for {child.child_name}.", field='date_of_birth',
            )
    return children


# ── Creation ──────────────────────────────────────────────────────────────────

def _send_confirmation(registration):
    try:
        send_registration_confirmation(registration)
    except Exception:
        logger.exception(f"Confirmation e-mail crashed for {registration.registration_number}")


def create_registration(draft, catalog=None, created_by=None):
    """
    Validate *draft*, price every child against *catalog* (the camp's active
    SessionDate rows when omitted) and persist the registration together with
    its children, registration number and identity token.

    Nothing is written when any check fails.
    """
    children = _validate_draft(draft)
    camp_type = _check_choice(CampType, draft.camp_type, 'camp_type')
    payment_status = _check_choice(Registration.PaymentStatus, draft.payment_status, 'payment_status')
    payment_method = _check_choice(Registration.PaymentMethod, draft.payment_method, 'payment_method')
    registration_type = _check_choice(
        Registration.RegistrationType, draft.registration_type, 'registration_type',
    )

    if catalog is None:
        catalog = SessionCatalog.for_camp(camp_type)

    priced = []
    for child in children:
        selection = normalise_selection(child.selected_dates, child.session_types)
        priced.append((child, selection, price_child(selection, selection, catalog)))
    total = sum((price for _, _, price in priced), Decimal('0'))

    now = timezone.now()
    with transaction.atomic():
        registration = Registration(
            camp_type=camp_type,
            parent_name=draft.parent_name.strip(),
            email=draft.email.strip(),
            phone=draft.phone.strip(),
            emergency_contact=draft.emergency_contact or '',
            total_amount=total,
            amount_paid=total if payment_status == Registration.PaymentStatus.PAID else Decimal('0'),
            payment_status=payment_status,
            payment_method=payment_method,
            payment_reference=draft.payment_reference or '',
            registration_type=registration_type,
            consent_given=True,
            status=Registration.Status.ACTIVE,
            admin_notes=draft.admin_notes or '',
            created_by=created_by,
            created_at=now,
        )
        registration.identity_token = tokens.encode(registration.id)
        _save_with_unique_number(registration, now)

        Child.objects.bulk_create([
            Child(
                registration=registration,
                position=position,
                child_name=child.child_name.strip(),
                date_of_birth=as_date(child.date_of_birth),
                age_range=child.age_range or '',
                special_needs=child.special_needs or '',
                session_types=selection,
                price=price,
            )
            for position, (child, selection, price) in enumerate(priced)
        ])
        transaction.on_commit(lambda: _send_confirmation(registration))

    logger.info(
        f"Registration {registration.registration_number} created for "
        f"{registration.parent_name}: {len(priced)} child(ren), total {total}"
    )
    return registration


# ── Lookups ───────────────────────────────────────────────────────────────────

def get_by_id(registration_id):
    try:
        return Registration.objects.get(pk=_as_uuid(registration_id))
    except Registration.DoesNotExist:
        raise RegistrationNotFound()


def get_by_number(registration_number):
    try:
        return Registration.objects.get(registration_number=registration_number)
    except Registration.DoesNotExist:
        raise RegistrationNotFound()


def resolve_by_token(token):
    """
    Decode *token* and load the registration it names.  Malformed, foreign or
    stale tokens all end in RegistrationNotFound.
    """
    decoded = tokens.decode(token)
    if decoded is None:
        raise RegistrationNotFound('Unrecognised check-in code.')
    return get_by_id(decoded.id)


def list_registrations(camp_type=None, payment_status=None, status=None, start=None, end=None):
    """Registrations newest first, filtered by camp, payment, status and creation date."""
    qs = Registration.objects.prefetch_related('children')
    if camp_type:
        qs = qs.filter(camp_type=camp_type)
    if payment_status:
        qs = qs.filter(payment_status=payment_status)
    if status:
        qs = qs.filter(status=status)
    if start:
        qs = qs.filter(created_at__date__gte=start)
    if end:
        qs = qs.filter(created_at__date__lte=end)
    return qs.order_by('-created_at')


def search_registrations(term):
    """Case-insensitive match on number, parent name, e-mail or phone."""
    term = (term or '').strip()
    if not term:
        return list_registrations()
    return (
        Registration.objects
        .prefetch_related('children')
        .filter(
            Q(registration_number__icontains=term)
            | Q(parent_name__icontains=term)
            | Q(email__icontains=term)
            | Q(phone__icontains=term)
        )
        .order_by('-created_at')
    )


# ── State changes ─────────────────────────────────────────────────────────────

def update_payment_status(registration_id, status, method=None, reference=None, amount_paid=None):
    """
    Record a payment state.  ``paid`` implies the full total unless an
    explicit *amount_paid* is given; ``unpaid`` resets it to zero.
    """
    status = _check_choice(Registration.PaymentStatus, status, 'payment_status')
    if method is not None:
        method = _check_choice(Registration.PaymentMethod, method, 'payment_method')

    with transaction.atomic():
        try:
            registration = (
                Registration.objects.select_for_update()
                .get(pk=_as_uuid(registration_id))
            )
        except Registration.DoesNotExist:
            raise RegistrationNotFound()

        if amount_paid is not None:
            amount_paid = as_money(amount_paid)
            if amount_paid < 0 or amount_paid > registration.total_amount:
                raise ValidationError(
                    'Amount paid must be between 0 and the registration total.',
                    field='amount_paid',
                )
        elif status == Registration.PaymentStatus.PAID:
            amount_paid = registration.total_amount
        elif status == Registration.PaymentStatus.UNPAID:
            amount_paid = Decimal('0')

        registration.payment_status = status
        update_fields = ['payment_status', 'updated_at']
        if method is not None:
            registration.payment_method = method
            update_fields.append('payment_method')
        if reference:
            registration.payment_reference = reference
            update_fields.append('payment_reference')
        if amount_paid is not None:
            registration.amount_paid = amount_paid
            update_fields.append('amount_paid')
        registration.save(update_fields=update_fields)

    logger.info(
        f"Registration {registration.registration_number} payment → {status} "
        f"(method={registration.payment_method}, paid={registration.amount_paid})"
    )
    return registration


def _transition(registration_id, new_status):
    pk = _as_uuid(registration_id)
    moved = Registration.objects.filter(
        pk=pk, status=Registration.Status.ACTIVE,
    ).update(status=new_status, updated_at=timezone.now())
    registration = get_by_id(pk)
    if not moved:
        raise InvalidTransitionError(
            f"Registration {registration.registration_number} is "
            f"{registration.status}, not active.",
            status=registration.status,
        )
    logger.info(f"Registration {registration.registration_number} → {new_status}")
    return registration


def cancel(registration_id):
    """Mark a registration cancelled; its attendance and billing rows stay."""
    return _transition(registration_id, Registration.Status.CANCELLED)


def complete(registration_id):
    return _transition(registration_id, Registration.Status.COMPLETED)


def add_admin_note(registration_id, note):
    """Append a timestamped line to the registration's admin notes."""
    note = (note or '').strip()
    if not note:
        raise ValidationError('Note text is required.', field='note')
    with transaction.atomic():
        try:
            registration = (
                Registration.objects.select_for_update()
                .get(pk=_as_uuid(registration_id))
            )
        except Registration.DoesNotExist:
            raise RegistrationNotFound()
        line = f"[{timezone.now().isoformat()}] {note}"
        registration.admin_notes = (
            f"{registration.admin_notes}\n{line}" if registration.admin_notes else line
        )
        registration.save(update_fields=['admin_notes', 'updated_at'])
    return registration
