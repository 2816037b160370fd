from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.models import CustomUser
from core.testing import make_registration, make_staff, seed_summer_camp

from .models import NotificationLog
from .services import notify_billing, send_registration_confirmation


def _payload(**extra):
    payload = {
        'child_name':      'Amani',
        'parent_name':     "Wanjiru O'Brien",
        'email':           'wanjiru@example.com',
        'phone':           '+254700000001',
        'amount_due':      Decimal('5000.00'),
        'camp_type':       'mid-term-october',
        'registration_id': None,
    }
    payload.update(extra)
    return payload


@override_settings(CAMP_BILLING_NOTIFY_EMAILS=['accounts@example.com', 'office@example.com'])
class NotifyBillingTest(TestCase):
    def test_sends_plain_text_alert(self):
        self.assertTrue(notify_billing(_payload()))
        message = mail.outbox[0]
        self.assertEqual(message.to, ['accounts@example.com', 'office@example.com'])
        self.assertEqual(message.subject, 'Unpaid check-in: Amani - 5000.00 KES')
        self.assertIn("Wanjiru O'Brien", message.body)
        self.assertIn('Mid Term October', message.body)
        log = NotificationLog.objects.get()
        self.assertEqual(log.recipients, 'accounts@example.com, office@example.com')
        self.assertTrue(log.success)

    def test_transport_failure_returns_false(self):
        with mock.patch('communications.services.send_mail', side_effect=OSError('refused')):
            self.assertFalse(notify_billing(_payload()))
        log = NotificationLog.objects.get()
        self.assertFalse(log.success)
        self.assertEqual(log.error_message, 'refused')

    def test_links_registration(self):
        seed_summer_camp()
        registration = make_registration()
        notify_billing(_payload(registration_id=str(registration.id)))
        self.assertEqual(NotificationLog.objects.get().registration, registration)


class ConfirmationTest(TestCase):
    def test_lists_children_and_dates(self):
        seed_summer_camp()
        registration = make_registration()
        self.assertTrue(send_registration_confirmation(registration))
        body = mail.outbox[0].body
        self.assertIn('Amani', body)
        self.assertIn('2026-07-06 (full day)', body)
        self.assertIn('5000', body)


class NotificationLogViewTest(TestCase):
    def test_failed_filter(self):
        with override_settings(CAMP_BILLING_NOTIFY_EMAILS=[]):
            notify_billing(_payload())
        self.client.force_login(make_staff('acc1', role=CustomUser.Role.ACCOUNTS))
        response = self.client.get(reverse('notification_log'), {'failed': '1'})
        self.assertEqual(response.status_code, 200)
        rows = response.json()['notifications']
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['error_message'], 'No recipients configured.')
