from datetime import timedelta
from unittest import mock

from django.core import mail
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from billing.models import BillingActionItem
from bookings import services as bookings, tokens
from core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    AttendanceNotFound,
    ChildNotFound,
    RegistrationInactiveError,
    RegistrationNotFound,
)
from core.testing import child_draft, make_registration, make_staff, seed_summer_camp

from . import gate, services
from .models import AttendanceRecord


class CheckInTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.staff = make_staff()
        self.registration = make_registration(children=[child_draft('Amani'), child_draft('Baraka')])

    def test_check_in_creates_record(self):
        record = services.check_in(self.registration.id, 'Amani', self.staff, notes='Dropped by aunt')
        self.assertEqual(record.attendance_date, timezone.localdate())
        self.assertEqual(record.marked_by, self.staff)
        self.assertIsNone(record.check_out_time)
        self.assertEqual(record.state, 'checked_in')
        self.assertEqual(services.has_checked_in_today(self.registration.id, 'Amani'), record)
        self.assertIsNone(services.has_checked_in_today(self.registration.id, 'Baraka'))

    def test_second_check_in_same_day_is_a_conflict(self):
        services.check_in(self.registration.id, 'Amani', self.staff)
        with self.assertRaises(AlreadyCheckedInError):
            services.check_in(self.registration.id, 'Amani', self.staff)
        self.assertEqual(AttendanceRecord.objects.count(), 1)

    def test_next_day_is_a_new_record(self):
        today = timezone.localdate()
        services.check_in(self.registration.id, 'Amani', self.staff, on=today)
        services.check_in(self.registration.id, 'Amani', self.staff, on=today + timedelta(days=1))
        self.assertEqual(AttendanceRecord.objects.count(), 2)

    def test_storage_constraint_is_authoritative(self):
        services.check_in(self.registration.id, 'Amani', self.staff)
        # Simulate a racing station whose pre-check saw nothing.
        with mock.patch.object(services, 'has_checked_in_today', return_value=None):
            with self.assertRaises(AlreadyCheckedInError):
                services.check_in(self.registration.id, 'Amani', self.staff)
        self.assertEqual(AttendanceRecord.objects.count(), 1)

    def test_database_refuses_duplicate_rows(self):
        services.check_in(self.registration.id, 'Amani', self.staff)
        with self.assertRaises(IntegrityError), transaction.atomic():
            AttendanceRecord.objects.create(
                registration=self.registration, child_name='Amani',
                attendance_date=timezone.localdate(), marked_by=self.staff,
            )

    def test_unknown_child(self):
        with self.assertRaises(ChildNotFound):
            services.check_in(self.registration.id, 'Nobody', self.staff)

    def test_unknown_registration(self):
        with self.assertRaises(RegistrationNotFound):
            services.check_in('00000000-0000-0000-0000-000000000000', 'Amani', self.staff)

    def test_cancelled_registration_rejects_check_in(self):
        bookings.cancel(self.registration.id)
        with self.assertRaises(RegistrationInactiveError):
            services.check_in(self.registration.id, 'Amani', self.staff)


class CheckOutTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.staff = make_staff()
        self.registration = make_registration()

    def test_check_in_then_out_then_out_again(self):
        record = services.check_in(self.registration.id, 'Amani', self.staff)
        checked_out = services.check_out(record.id)
        self.assertIsNotNone(checked_out.check_out_time)
        self.assertEqual(checked_out.state, 'checked_out')

        with self.assertRaises(AlreadyCheckedOutError):
            services.check_out(record.id)
        record.refresh_from_db()
        self.assertEqual(record.check_out_time, checked_out.check_out_time)

    def test_unknown_attendance_id(self):
        with self.assertRaises(AttendanceNotFound):
            services.check_out(999999)
        with self.assertRaises(AttendanceNotFound):
            services.check_out('abc')


class AttendanceQueryTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.staff = make_staff()
        self.unpaid = make_registration(children=[child_draft('Amani'), child_draft('Baraka')])
        self.paid = make_registration(parent_name='Njeri', email='njeri@example.com')
        bookings.update_payment_status(self.paid.id, 'paid')

    def test_summary_counts(self):
        today = timezone.localdate()
        first = services.check_in(self.unpaid.id, 'Amani', self.staff)
        services.check_in(self.unpaid.id, 'Baraka', self.staff)
        services.check_in(self.paid.id, 'Amani', self.staff)
        services.check_out(first.id)

        summary = services.get_summary()
        self.assertEqual(summary, [{
            'date': today, 'checked_in': 3, 'checked_out': 1, 'present': 2, 'paid': 1, 'unpaid': 2,
        }])

    def test_by_date_and_registration(self):
        services.check_in(self.unpaid.id, 'Amani', self.staff)
        services.check_in(self.paid.id, 'Amani', self.staff)
        self.assertEqual(services.get_todays_attendance().count(), 2)
        self.assertEqual(services.get_by_date(timezone.localdate(), camp_type='easter').count(), 0)
        self.assertEqual(
            [r.child_name for r in services.get_by_registration(self.unpaid.id)], ['Amani'],
        )


@override_settings(CAMP_BILLING_NOTIFY_EMAILS=['accounts@example.com'])
class GateFlowTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.staff = make_staff()
        self.registration = make_registration(children=[child_draft('Amani'), child_draft('Baraka')])

    def test_unpaid_check_in_escalates(self):
        with self.captureOnCommitCallbacks(execute=True):
            record, item = gate.check_in_child(self.registration.id, 'Amani', self.staff)
        self.assertEqual(record.child_name, 'Amani')
        self.assertEqual(item.action_type, BillingActionItem.ActionType.INVOICE_NEEDED)
        self.assertEqual(item.amount_due, self.registration.total_amount)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['accounts@example.com'])

    def test_paid_check_in_does_not_escalate(self):
        bookings.update_payment_status(self.registration.id, 'paid')
        record, item = gate.check_in_child(self.registration.id, 'Amani', self.staff)
        self.assertIsNone(item)
        self.assertFalse(BillingActionItem.objects.exists())

    def test_notification_failure_does_not_fail_check_in(self):
        with mock.patch('communications.services.send_mail', side_effect=OSError('smtp down')):
            with self.captureOnCommitCallbacks(execute=True):
                record, item = gate.check_in_child(self.registration.id, 'Amani', self.staff)
        self.assertTrue(AttendanceRecord.objects.filter(pk=record.pk).exists())
        self.assertTrue(BillingActionItem.objects.filter(pk=item.pk).exists())

    def test_notification_crash_does_not_fail_check_in(self):
        with mock.patch('billing.services.notify_billing', side_effect=RuntimeError('boom')):
            with self.captureOnCommitCallbacks(execute=True):
                record, item = gate.check_in_child(self.registration.id, 'Amani', self.staff)
        self.assertIsNotNone(item.pk)

    def test_scan_checks_in_every_child(self):
        with self.captureOnCommitCallbacks(execute=True):
            result = gate.check_in_by_token(self.registration.identity_token, self.staff)
        self.assertEqual(result.checked_in, ['Amani', 'Baraka'])
        self.assertEqual(result.already_checked_in, [])
        self.assertEqual(len(result.action_items), 2)
        self.assertEqual(len(mail.outbox), 2)

        again = gate.check_in_by_token(self.registration.identity_token, self.staff)
        self.assertEqual(again.checked_in, [])
        self.assertEqual(again.already_checked_in, ['Amani', 'Baraka'])
        self.assertEqual(BillingActionItem.objects.count(), 2)

    def test_scan_fails_closed(self):
        for token in ('', 'garbage', tokens.encode('00000000-0000-0000-0000-000000000000')):
            with self.assertRaises(RegistrationNotFound):
                gate.check_in_by_token(token, self.staff)
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_scan_cancelled_registration(self):
        bookings.cancel(self.registration.id)
        with self.assertRaises(RegistrationInactiveError):
            gate.check_in_by_token(self.registration.identity_token, self.staff)


class AttendanceViewTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.staff = make_staff()
        self.registration = make_registration()
        self.client.force_login(self.staff)

    def test_check_in_conflict_and_check_out(self):
        url = reverse('check_in')
        payload = {'registration_id': str(self.registration.id), 'child_name': 'Amani'}
        first = self.client.post(url, payload, content_type='application/json')
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()['action_item']['status'], 'pending')

        second = self.client.post(url, payload, content_type='application/json')
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.json()['error'], 'already_checked_in')

        record_id = first.json()['record']['id']
        out = self.client.post(reverse('check_out', args=[record_id]), {}, content_type='application/json')
        self.assertEqual(out.status_code, 200)
        again = self.client.post(reverse('check_out', args=[record_id]), {}, content_type='application/json')
        self.assertEqual(again.status_code, 409)

    def test_scan_garbage_is_404(self):
        response = self.client.post(reverse('scan'), {'token': 'nope'}, content_type='application/json')
        self.assertEqual(response.status_code, 404)

    def test_list_for_day(self):
        services.check_in(self.registration.id, 'Amani', self.staff)
        response = self.client.get(reverse('attendance_list'), {'date': timezone.localdate().isoformat()})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['child_name'] for r in response.json()['records']], ['Amani'])

    def test_bad_date_is_400(self):
        response = self.client.get(reverse('attendance_list'), {'date': '06/07/2026'})
        self.assertEqual(response.status_code, 400)
