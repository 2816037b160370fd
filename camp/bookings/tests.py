import io
import json
from datetime import date
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.models import CustomUser
from communications.models import NotificationLog
from core.exceptions import (
    ConsentRequiredError,
    DuplicateChildError,
    EmptyRegistrationError,
    InvalidChoiceError,
    InvalidSessionTypeError,
    InvalidTransitionError,
    RegistrationNotFound,
    UnknownDateError,
    ValidationError,
)
from core.testing import (
    CAMP_DAYS,
    child_draft,
    make_registration,
    make_staff,
    registration_draft,
    seed_summer_camp,
)

from . import services, tokens
from .catalog import SessionCatalog, seed_session_dates
from .models import CampType, Child, Registration, SessionDate
from .pricing import normalise_selection, price_child, price_registration, reprice_date

D1, D2, D3, D4, D5 = ('2026-07-06', '2026-07-07', '2026-07-08', '2026-07-09', '2026-07-10')


def _catalog():
    return SessionCatalog.from_mapping({
        day: {'half': '1500', 'full': '2500'} for day in (D1, D2, D3, D4, D5)
    })


class SessionCatalogTest(TestCase):
    def test_rate_lookup(self):
        catalog = _catalog()
        self.assertEqual(catalog.rate(D1, 'half'), Decimal('1500'))
        self.assertEqual(catalog.rate(date(2026, 7, 6)), Decimal('2500'))
        self.assertEqual(len(catalog), 5)
        self.assertIn(D3, catalog)
        self.assertNotIn('not-a-date', catalog)

    def test_unknown_date(self):
        with self.assertRaises(UnknownDateError):
            _catalog().rate('2026-08-01', 'full')

    def test_invalid_session_type(self):
        with self.assertRaises(InvalidSessionTypeError):
            _catalog().rate(D1, 'evening')

    def test_for_camp_reads_active_rows_only(self):
        rows = seed_summer_camp()
        rows[0].is_active = False
        rows[0].save()
        SessionDate.objects.create(
            camp_type=CampType.EASTER, date=date(2026, 4, 2),
            half_day_rate=Decimal('1000'), full_day_rate=Decimal('2000'),
        )

        catalog = SessionCatalog.for_camp(CampType.SUMMER)
        self.assertEqual(len(catalog), 4)
        self.assertNotIn(CAMP_DAYS[0], catalog)
        self.assertNotIn(date(2026, 4, 2), catalog)

    @override_settings(CAMP_DEFAULT_HALF_DAY_RATE='1200', CAMP_DEFAULT_FULL_DAY_RATE='2000')
    def test_seed_uses_default_rates(self):
        row, = seed_session_dates(CampType.EASTER, ['2026-04-02'])
        self.assertEqual(row.half_day_rate, Decimal('1200'))
        self.assertEqual(row.full_day_rate, Decimal('2000'))


class PricingEngineTest(TestCase):
    def test_full_day_is_the_default(self):
        self.assertEqual(price_child([D1, D2], {}, _catalog()), Decimal('5000'))

    def test_mixed_session_types(self):
        price = price_child([D1, D2, D3], {D2: 'half'}, _catalog())
        self.assertEqual(price, Decimal('6500'))

    def test_duplicate_dates_count_once(self):
        self.assertEqual(price_child([D1, D1, D1], {}, _catalog()), Decimal('2500'))

    def test_session_types_for_unselected_dates_are_ignored(self):
        self.assertEqual(normalise_selection([D2], {D1: 'half', D2: 'half'}), {D2: 'half'})

    def test_unknown_date_fails_the_whole_price(self):
        with self.assertRaises(UnknownDateError):
            price_child([D1, '2026-12-25'], {}, _catalog())

    def test_registration_total_scenario(self):
        first = Child(session_types={D1: 'full', D2: 'full', D3: 'full'})
        second = Child(session_types={D4: 'half', D5: 'half'})
        self.assertEqual(price_registration([first, second], _catalog()), Decimal('10500'))

    def test_registration_needs_children(self):
        with self.assertRaises(EmptyRegistrationError):
            price_registration([], _catalog())

    def test_reprice_single_date(self):
        self.assertEqual(
            reprice_date(Decimal('5000'), D1, 'full', 'half', _catalog()),
            Decimal('4000'),
        )


class IdentityTokenTest(TestCase):
    def test_round_trip(self):
        token = tokens.encode('abc-123', issued_at=1751760000000)
        decoded = tokens.decode(token)
        self.assertEqual(decoded.id, 'abc-123')
        self.assertEqual(decoded.issued_at, 1751760000000)
        self.assertEqual(json.loads(token)['type'], 'camp_registration')

    def test_garbage_decodes_to_none(self):
        garbage = [
            None, 42, '', 'not json', '[]', '"string"', '{"type": "other", "id": "x", "issuedAt": 1}',
            '{"type": "camp_registration", "issuedAt": 1}',
            '{"type": "camp_registration", "id": "", "issuedAt": 1}',
            '{"type": "camp_registration", "id": 7, "issuedAt": 1}',
            '{"type": "camp_registration", "id": "x", "issuedAt": "yesterday"}',
            '{"type": "camp_registration", "id": "x", "issuedAt": true}',
            '[' * 100000,
        ]
        for token in garbage:
            self.assertIsNone(tokens.decode(token), token if isinstance(token, str) and len(token) < 80 else '')


class CreateRegistrationTest(TestCase):
    def setUp(self):
        seed_summer_camp()

    def test_two_children_scenario(self):
        registration = make_registration(children=[
            child_draft('Amani', CAMP_DAYS[:3]),
            child_draft('Baraka', CAMP_DAYS[3:], {day.isoformat(): 'half' for day in CAMP_DAYS[3:]}),
        ])

        self.assertEqual(registration.total_amount, Decimal('10500'))
        self.assertEqual(registration.payment_status, Registration.PaymentStatus.UNPAID)
        self.assertEqual(registration.payment_method, Registration.PaymentMethod.PENDING)
        self.assertEqual(registration.status, Registration.Status.ACTIVE)
        self.assertEqual(registration.amount_paid, Decimal('0'))
        self.assertRegex(registration.registration_number, r'^CAMP-\d{4}-[0-9A-F]{6}$')

        children = list(registration.children.all())
        self.assertEqual([c.child_name for c in children], ['Amani', 'Baraka'])
        self.assertEqual(children[0].price, Decimal('7500'))
        self.assertEqual(children[1].price, Decimal('3000'))
        self.assertEqual(children[0].selected_dates, CAMP_DAYS[:3])

    def test_token_resolves_back_to_registration(self):
        registration = make_registration()
        decoded = tokens.decode(registration.identity_token)
        self.assertEqual(decoded.id, str(registration.id))
        self.assertEqual(services.resolve_by_token(registration.identity_token), registration)

    def test_consent_required_persists_nothing(self):
        with self.assertRaises(ConsentRequiredError):
            services.create_registration(registration_draft(consent_given=False))
        self.assertFalse(Registration.objects.exists())
        self.assertFalse(Child.objects.exists())

    def test_child_without_dates_is_rejected(self):
        with self.assertRaises(EmptyRegistrationError):
            make_registration(children=[child_draft(dates=[])])
        with self.assertRaises(EmptyRegistrationError):
            make_registration(children=[])
        self.assertFalse(Registration.objects.exists())

    def test_unknown_date_persists_nothing(self):
        with self.assertRaises(UnknownDateError):
            make_registration(children=[child_draft(dates=['2026-12-25'])])
        self.assertFalse(Registration.objects.exists())

    def test_duplicate_child_names(self):
        with self.assertRaises(DuplicateChildError):
            make_registration(children=[child_draft('Amani'), child_draft('Amani')])

    def test_unknown_camp_type(self):
        with self.assertRaises(InvalidChoiceError):
            make_registration(camp_type='winter')

    def test_injected_catalog_wins(self):
        catalog = SessionCatalog.from_mapping({CAMP_DAYS[0]: {'half': '100', 'full': '200'}})
        registration = services.create_registration(
            registration_draft(children=[child_draft(dates=CAMP_DAYS[:1])]), catalog=catalog,
        )
        self.assertEqual(registration.total_amount, Decimal('200'))

    @override_settings(CAMP_REGISTRATION_NUMBER_PREFIX='AK')
    def test_registration_number_prefix(self):
        self.assertTrue(make_registration().registration_number.startswith('AK-'))

    def test_number_taken_concurrently_is_redrawn(self):
        first = make_registration()
        # Another create grabbed the number after our availability check.
        drawn = [first.registration_number, 'CAMP-2026-0A0B0C']
        with mock.patch.object(services, '_new_registration_number', side_effect=drawn):
            second = make_registration(parent_name='Njeri', email='njeri@example.com')
        self.assertEqual(second.registration_number, 'CAMP-2026-0A0B0C')
        self.assertEqual(Registration.objects.count(), 2)
        self.assertEqual(second.children.count(), 1)

    def test_confirmation_email_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            registration = make_registration()
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['wanjiru@example.com'])
        self.assertIn(registration.registration_number, mail.outbox[0].body)
        log = NotificationLog.objects.get()
        self.assertEqual(log.notification_type, NotificationLog.NotificationType.REGISTRATION_CONFIRMATION)
        self.assertEqual(log.registration, registration)

    def test_draft_from_camel_case_payload(self):
        draft = services.RegistrationDraft.from_dict({
            'campType': 'summer',
            'parentName': 'Otieno',
            'email': 'o@example.com',
            'phone': '0711',
            'consentGiven': True,
            'children': [{
                'childName': 'Zawadi',
                'dateOfBirth': '2019-01-01',
                'selectedDates': [CAMP_DAYS[0].isoformat()],
                'sessionTypeByDate': {CAMP_DAYS[0].isoformat(): 'half'},
            }],
        })
        registration = services.create_registration(draft)
        self.assertEqual(registration.total_amount, Decimal('1500'))

    def test_consent_must_be_literally_true(self):
        draft = services.RegistrationDraft.from_dict({'consent_given': 'yes', 'children': []})
        self.assertFalse(draft.consent_given)


class RegistrationStoreTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.registration = make_registration()

    def test_lookups(self):
        self.assertEqual(services.get_by_id(str(self.registration.id)), self.registration)
        self.assertEqual(
            services.get_by_number(self.registration.registration_number), self.registration,
        )
        with self.assertRaises(RegistrationNotFound):
            services.get_by_id('not-a-uuid')
        with self.assertRaises(RegistrationNotFound):
            services.get_by_number('CAMP-1999-000000')

    def test_resolve_rejects_bad_tokens(self):
        with self.assertRaises(RegistrationNotFound):
            services.resolve_by_token('garbage')
        with self.assertRaises(RegistrationNotFound):
            services.resolve_by_token(tokens.encode('00000000-0000-0000-0000-000000000000'))

    def test_paid_defaults_amount_to_total(self):
        registration = services.update_payment_status(
            self.registration.id, 'paid', method='mobile_money', reference='QX12',
        )
        self.assertEqual(registration.amount_paid, registration.total_amount)
        self.assertEqual(registration.payment_method, 'mobile_money')
        self.assertEqual(registration.payment_reference, 'QX12')
        self.assertEqual(registration.total_amount, Decimal('5000'))

    def test_partial_payment(self):
        registration = services.update_payment_status(self.registration.id, 'partial', amount_paid='2000')
        self.assertEqual(registration.amount_outstanding, Decimal('3000'))
        with self.assertRaises(ValidationError):
            services.update_payment_status(self.registration.id, 'partial', amount_paid='9000')
        with self.assertRaises(InvalidChoiceError):
            services.update_payment_status(self.registration.id, 'refunded')

    def test_cancel_then_complete_is_rejected(self):
        services.cancel(self.registration.id)
        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, Registration.Status.CANCELLED)
        with self.assertRaises(InvalidTransitionError):
            services.complete(self.registration.id)

    def test_admin_notes_append(self):
        services.add_admin_note(self.registration.id, 'Called parent')
        registration = services.add_admin_note(self.registration.id, 'Will pay Friday')
        lines = registration.admin_notes.splitlines()
        self.assertEqual(len(lines), 2)
        self.assertRegex(lines[0], r'^\[\d{4}-\d{2}-\d{2}T.*\] Called parent$')
        self.assertTrue(lines[1].endswith('Will pay Friday'))

    def test_search_and_list(self):
        other = make_registration(parent_name='Njeri Otieno', email='njeri@example.com', phone='0722')
        self.assertEqual(list(services.search_registrations('njeri')), [other])
        self.assertEqual(list(services.search_registrations('700000001')), [self.registration])
        self.assertEqual(list(services.list_registrations()), [other, self.registration])
        services.cancel(other.id)
        self.assertEqual(list(services.list_registrations(status='active')), [self.registration])


class RegistrationViewTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.admin = make_staff('office', role=CustomUser.Role.ADMIN)
        self.gate = make_staff('gate1')

    def _payload(self, **extra):
        payload = {
            'camp_type': 'summer',
            'parent_name': 'Achieng',
            'email': 'achieng@example.com',
            'phone': '0733',
            'consent_given': True,
            'registration_type': 'ground_registration',
            'children': [{
                'child_name': 'Imani',
                'date_of_birth': '2017-05-05',
                'selected_dates': [CAMP_DAYS[0].isoformat(), CAMP_DAYS[1].isoformat()],
                'session_types': {CAMP_DAYS[1].isoformat(): 'half'},
            }],
        }
        payload.update(extra)
        return payload

    def test_requires_login(self):
        response = self.client.post(reverse('create_registration'), self._payload(),
                                    content_type='application/json')
        self.assertEqual(response.status_code, 401)

    def test_gate_staff_cannot_register(self):
        self.client.force_login(self.gate)
        response = self.client.post(reverse('create_registration'), self._payload(),
                                    content_type='application/json')
        self.assertEqual(response.status_code, 403)

    def test_create_and_fetch(self):
        self.client.force_login(self.admin)
        response = self.client.post(reverse('create_registration'), self._payload(),
                                    content_type='application/json')
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(Decimal(body['total_amount']), Decimal('4000'))
        self.assertEqual(body['registration_type'], 'ground_registration')
        self.assertEqual(Registration.objects.get().created_by, self.admin)

        detail = self.client.get(reverse('registration_detail', args=[body['id']]))
        self.assertEqual(detail.status_code, 200)
        self.assertTrue(detail.json()['qr_png_base64'])

    def test_missing_consent_is_400(self):
        self.client.force_login(self.admin)
        response = self.client.post(reverse('create_registration'), self._payload(consent_given=False),
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'consent_required')

    def test_wrongly_typed_fields_are_400(self):
        self.client.force_login(self.admin)
        child = self._payload()['children'][0]
        cases = [
            ('parent_name', self._payload(parent_name=12345)),
            ('phone', self._payload(phone=['0733'])),
            ('child_name', self._payload(children=[{**child, 'child_name': 7}])),
            ('session_types', self._payload(children=[{**child, 'session_types': ['full']}])),
            ('selected_dates', self._payload(children=[{**child, 'selected_dates': '2026-07-06'}])),
        ]
        for field_name, payload in cases:
            with self.subTest(field=field_name):
                response = self.client.post(reverse('create_registration'), payload,
                                            content_type='application/json')
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()['field'], field_name)
        self.assertFalse(Registration.objects.exists())

    def test_camel_case_wrong_types_are_400(self):
        self.client.force_login(self.admin)
        payload = {
            'campType': 'summer', 'parentName': 'Achieng', 'email': 'a@example.com',
            'phone': '0733', 'consentGiven': True,
            'children': [{'childName': 'Imani', 'dateOfBirth': '2017-05-05',
                          'selectedDates': [CAMP_DAYS[0].isoformat()],
                          'sessionTypeByDate': ['full']}],
        }
        response = self.client.post(reverse('create_registration'), payload,
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['field'], 'session_types')

    def test_get_is_405(self):
        self.client.force_login(self.admin)
        self.assertEqual(self.client.get(reverse('create_registration')).status_code, 405)

    def test_resolve_unknown_token_is_404(self):
        self.client.force_login(self.gate)
        response = self.client.post(reverse('resolve_token'), {'token': '{"type":"nope"}'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'registration_not_found')


class SeedCommandTest(TestCase):
    def test_weekdays_only(self):
        out = io.StringIO()
        call_command('seed_session_dates', 'summer', '2026-07-03', '2026-07-07',
                     '--skip-weekends', '--half', '1000', stdout=out)
        days = list(SessionDate.objects.values_list('date', flat=True).order_by('date'))
        self.assertEqual(days, [date(2026, 7, 3), date(2026, 7, 6), date(2026, 7, 7)])
        self.assertEqual(SessionDate.objects.first().half_day_rate, Decimal('1000'))
        self.assertIn('Published 3 day(s)', out.getvalue())

    def test_bad_range(self):
        with self.assertRaises(CommandError):
            call_command('seed_session_dates', 'summer', '2026-07-07', '2026-07-01')
