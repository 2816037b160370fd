from decimal import Decimal
from unittest import mock

from django.core import mail
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.models import CustomUser
from attendance import gate
from bookings import services as bookings
from communications.models import NotificationLog
from core.exceptions import (
    ActionItemNotFound,
    DuplicatePendingItemError,
    InvalidTransitionError,
)
from core.testing import child_draft, make_registration, make_staff, seed_summer_camp

from . import services
from .models import BillingActionItem


@override_settings(CAMP_BILLING_NOTIFY_EMAILS=['accounts@example.com'])
class EscalationTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.gate_staff = make_staff('gate1')
        self.accounts = make_staff('acc1', role=CustomUser.Role.ACCOUNTS)
        self.registration = make_registration(children=[child_draft('Amani'), child_draft('Baraka')])

    def test_one_item_per_unpaid_child(self):
        gate.check_in_child(self.registration.id, 'Amani', self.gate_staff)
        gate.check_in_child(self.registration.id, 'Baraka', self.gate_staff)

        items = BillingActionItem.objects.order_by('child_name')
        self.assertEqual([i.child_name for i in items], ['Amani', 'Baraka'])
        for item in items:
            self.assertEqual(item.action_type, BillingActionItem.ActionType.INVOICE_NEEDED)
            self.assertEqual(item.amount_due, Decimal('10000.00'))
            self.assertEqual(item.status, BillingActionItem.Status.PENDING)
            self.assertEqual(item.parent_name, 'Wanjiru Kamau')
            self.assertEqual(item.camp_type, 'summer')

    def test_escalation_is_idempotent(self):
        with self.captureOnCommitCallbacks(execute=True):
            first = services.escalate_unpaid_check_in(self.registration, 'Amani')
        with self.captureOnCommitCallbacks(execute=True):
            second = services.escalate_unpaid_check_in(self.registration, 'Amani')
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(BillingActionItem.objects.count(), 1)
        self.assertEqual(len(mail.outbox), 1)

    def test_partial_payment_reduces_amount_due(self):
        registration = bookings.update_payment_status(self.registration.id, 'partial', amount_paid='4000')
        item = services.escalate_unpaid_check_in(registration, 'Amani')
        self.assertEqual(item.amount_due, Decimal('6000.00'))
        self.assertEqual(item.amount_paid, Decimal('4000.00'))

    def test_lost_race_returns_winning_item_without_second_alert(self):
        winner = services.escalate_unpaid_check_in(self.registration, 'Amani')
        # The racing station's pre-check ran before the winner's insert.
        real_check = services.check_existing_item
        with mock.patch.object(services, 'check_existing_item',
                               side_effect=[None, real_check(self.registration.pk, 'Amani')]):
            with self.captureOnCommitCallbacks(execute=True):
                loser = services.escalate_unpaid_check_in(self.registration, 'Amani')
        self.assertEqual(loser.pk, winner.pk)
        self.assertEqual(BillingActionItem.objects.count(), 1)
        self.assertEqual(len(mail.outbox), 0)

    def test_storage_allows_one_pending_item_only(self):
        services.escalate_unpaid_check_in(self.registration, 'Amani')
        with self.assertRaises(IntegrityError), transaction.atomic():
            BillingActionItem.objects.create(
                registration=self.registration, child_name='Amani',
                parent_name='x', amount_due=Decimal('1'),
            )

    def test_completed_item_allows_a_new_pending_one(self):
        item = services.escalate_unpaid_check_in(self.registration, 'Amani')
        services.mark_completed(item.pk, self.accounts)
        again = services.escalate_unpaid_check_in(self.registration, 'Amani')
        self.assertNotEqual(item.pk, again.pk)

    def test_notification_content_and_log(self):
        with self.captureOnCommitCallbacks(execute=True):
            services.escalate_unpaid_check_in(self.registration, 'Amani')
        message = mail.outbox[0]
        self.assertIn('Amani', message.subject)
        self.assertIn('10000', message.subject)
        self.assertIn('Wanjiru Kamau', message.body)
        self.assertIn('Summer', message.body)
        log = NotificationLog.objects.get()
        self.assertTrue(log.success)
        self.assertEqual(log.notification_type, NotificationLog.NotificationType.BILLING_ALERT)

    @override_settings(CAMP_BILLING_NOTIFY_EMAILS=[])
    def test_no_recipients_is_logged_not_raised(self):
        with self.assertLogs('billing.services', level='WARNING') as logs:
            with self.captureOnCommitCallbacks(execute=True):
                item = services.escalate_unpaid_check_in(self.registration, 'Amani')
        self.assertIn(f"not delivered for action item {item.pk}", logs.output[-1])
        self.assertEqual(len(mail.outbox), 0)
        self.assertFalse(NotificationLog.objects.get().success)

    def test_manual_item_rejects_duplicate_pending(self):
        services.create_action_item(self.registration, 'Amani', 'receipt_needed', amount_due='0')
        with self.assertRaises(DuplicatePendingItemError):
            services.create_action_item(self.registration, 'Amani', 'payment_followup')


class ResolutionTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.accounts = make_staff('acc1', role=CustomUser.Role.ACCOUNTS)
        self.registration = make_registration(children=[child_draft('Amani'), child_draft('Baraka')])
        self.amani = services.escalate_unpaid_check_in(self.registration, 'Amani')
        self.baraka = services.escalate_unpaid_check_in(self.registration, 'Baraka')

    def test_mark_completed_stamps_staff(self):
        item = services.mark_completed(self.amani.pk, self.accounts, notes='Invoice sent')
        self.assertEqual(item.status, BillingActionItem.Status.COMPLETED)
        self.assertEqual(item.completed_by, self.accounts)
        self.assertIsNotNone(item.completed_at)
        self.assertEqual(item.notes, 'Invoice sent')
        with self.assertRaises(InvalidTransitionError):
            services.mark_completed(self.amani.pk, self.accounts)

    def test_progress_then_complete(self):
        services.start_progress(self.amani.pk, self.accounts)
        item = services.mark_completed(self.amani.pk, self.accounts)
        self.assertEqual(item.status, BillingActionItem.Status.COMPLETED)

    def test_cancel_item(self):
        item = services.cancel_item(self.amani.pk, self.accounts)
        self.assertEqual(item.status, BillingActionItem.Status.CANCELLED)
        self.assertEqual([i.pk for i in services.get_pending_items()], [self.baraka.pk])

    def test_unknown_item(self):
        with self.assertRaises(ActionItemNotFound):
            services.mark_completed(999999, self.accounts)

    def test_mark_completed_by_registration_counts_pending_only(self):
        services.start_progress(self.baraka.pk, self.accounts)
        closed = services.mark_completed_by_registration(self.registration.id, self.accounts)
        self.assertEqual(closed, 1)
        self.baraka.refresh_from_db()
        self.assertEqual(self.baraka.status, BillingActionItem.Status.IN_PROGRESS)
        self.assertEqual(services.mark_completed_by_registration(self.registration.id, self.accounts), 0)

    def test_reconcile_paid_closes_pending_items(self):
        registration, closed = services.reconcile_payment(
            self.registration.id, 'paid', self.accounts, method='cash_on_site',
        )
        self.assertEqual(closed, 2)
        self.assertTrue(registration.is_paid)
        self.assertFalse(services.get_pending_items().exists())
        self.amani.refresh_from_db()
        self.assertEqual(self.amani.notes, 'Payment confirmed by admin')
        self.assertEqual(self.amani.completed_by, self.accounts)

    def test_reconcile_partial_leaves_items_open(self):
        registration, closed = services.reconcile_payment(
            self.registration.id, 'partial', self.accounts, amount_paid='1000',
        )
        self.assertEqual(closed, 0)
        self.assertEqual(services.get_pending_items().count(), 2)

    def test_cancelling_registration_keeps_items(self):
        bookings.cancel(self.registration.id)
        self.assertEqual(BillingActionItem.objects.filter(registration=self.registration).count(), 2)


class BillingViewTest(TestCase):
    def setUp(self):
        seed_summer_camp()
        self.accounts = make_staff('acc1', role=CustomUser.Role.ACCOUNTS)
        self.gate_staff = make_staff('gate1')
        self.registration = make_registration()
        self.item = services.escalate_unpaid_check_in(self.registration, 'Amani')

    def test_gate_staff_cannot_see_queue(self):
        self.client.force_login(self.gate_staff)
        self.assertEqual(self.client.get(reverse('action_items')).status_code, 403)

    def test_queue_and_complete(self):
        self.client.force_login(self.accounts)
        response = self.client.get(reverse('action_items'), {'status': 'pending'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([i['id'] for i in response.json()['items']], [self.item.pk])

        done = self.client.post(reverse('complete_action_item', args=[self.item.pk]),
                                {'notes': 'Invoiced'}, content_type='application/json')
        self.assertEqual(done.status_code, 200)
        self.assertEqual(done.json()['completed_by'], 'acc1')

        again = self.client.post(reverse('complete_action_item', args=[self.item.pk]),
                                 {}, content_type='application/json')
        self.assertEqual(again.status_code, 409)

    def test_bad_status_filter(self):
        self.client.force_login(self.accounts)
        self.assertEqual(self.client.get(reverse('action_items'), {'status': 'open'}).status_code, 400)

    def test_reconcile_payment(self):
        self.client.force_login(self.accounts)
        response = self.client.post(
            reverse('reconcile_payment', args=[self.registration.id]),
            {'payment_status': 'paid', 'payment_method': 'mobile_money', 'payment_reference': 'QK7'},
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['payment_status'], 'paid')
        self.assertEqual(body['closed_action_items'], 1)

    def test_reconcile_missing_status_is_400(self):
        self.client.force_login(self.accounts)
        response = self.client.post(reverse('reconcile_payment', args=[self.registration.id]),
                                    {}, content_type='application/json')
        self.assertEqual(response.status_code, 400)
