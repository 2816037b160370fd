import csv
import io
import zipfile
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from accounts.models import CustomUser
from bookings import services as bookings
from bookings.models import CampType
from core.exceptions import ExportRenderingError
from core.testing import child_draft, make_registration, make_staff, seed_summer_camp

from . import services


class ReportFixtures(TestCase):
    def setUp(self):
        seed_summer_camp()
        # 10 000 unpaid, two children
        self.unpaid = make_registration(children=[child_draft('Amani'), child_draft('Baraka')])
        # 5 000 paid
        self.paid = make_registration(parent_name='Njeri', email='njeri@example.com')
        bookings.update_payment_status(self.paid.id, 'paid', method='card')
        # 5 000 partial, 2 000 received
        self.partial = make_registration(parent_name='Otieno', email='otieno@example.com')
        bookings.update_payment_status(self.partial.id, 'partial', amount_paid='2000')
        # cancelled: counted, no revenue
        self.cancelled = make_registration(parent_name='Kip', email='kip@example.com')
        bookings.cancel(self.cancelled.id)


class RevenueSummaryTest(ReportFixtures):
    def test_totals(self):
        summary = services.revenue_summary()
        self.assertEqual(summary['registrations'], 3)
        self.assertEqual(summary['children'], 4)
        self.assertEqual(summary['cancelled'], 1)
        self.assertEqual(summary['total_billed'], Decimal('20000'))
        self.assertEqual(summary['amount_collected'], Decimal('7000'))
        self.assertEqual(summary['amount_outstanding'], Decimal('13000'))
        self.assertEqual(summary['revenue_by_status'], {
            'unpaid': Decimal('10000'), 'partial': Decimal('5000'), 'paid': Decimal('5000'),
        })
        self.assertEqual(summary['registrations_by_camp'], {'summer': 3})

    def test_camp_filter(self):
        summary = services.revenue_summary(camp_type=CampType.EASTER)
        self.assertEqual(summary['registrations'], 0)
        self.assertEqual(summary['total_billed'], Decimal('0'))

    def test_camp_type_breakdown(self):
        row, = services.camp_type_breakdown()
        self.assertEqual(row['camp_type'], 'summer')
        self.assertEqual(row['label'], 'Summer Camp')
        self.assertEqual(row['registrations'], 3)
        self.assertEqual(row['children'], 4)
        self.assertEqual(row['paid_total'], Decimal('5000'))

    def test_details_include_children(self):
        details = services.registration_details()
        self.assertEqual(len(details), 4)
        self.assertEqual(len(details[-1]['children']), 2)


class ExportTest(ReportFixtures):
    def test_csv_columns_and_quoting(self):
        document = services.export_registrations(bookings.list_registrations(), services.CsvRenderer())
        rows = list(csv.reader(io.StringIO(document.decode('utf-8'))))
        self.assertEqual(tuple(rows[0]), services.EXPORT_COLUMNS)
        self.assertEqual(len(rows), 5)
        by_number = {row[0]: row for row in rows[1:]}
        unpaid = by_number[self.unpaid.registration_number]
        self.assertEqual(unpaid[1], 'Wanjiru Kamau')
        self.assertEqual(unpaid[5], '2')
        self.assertEqual(unpaid[7], 'unpaid')
        self.assertTrue(document.startswith(b'"Registration Number","Parent Name"'))

    def test_renderer_failure_is_raised(self):
        class BrokenRenderer:
            def render(self, columns, rows):
                raise OSError('disk full')

        with self.assertRaises(ExportRenderingError):
            services.export_registrations(bookings.list_registrations(), BrokenRenderer())

    def test_qr_archive(self):
        archive = zipfile.ZipFile(io.BytesIO(services.export_qr_codes(bookings.list_registrations())))
        names = sorted(archive.namelist())
        self.assertEqual(len(names), 4)
        self.assertIn(f"{self.paid.registration_number}_QR.png", names)
        self.assertTrue(archive.read(names[0]).startswith(b'\x89PNG'))


class ReportViewTest(ReportFixtures):
    def test_gate_staff_forbidden(self):
        self.client.force_login(make_staff('gate1'))
        self.assertEqual(self.client.get(reverse('report_summary')).status_code, 403)

    def test_summary_json(self):
        self.client.force_login(make_staff('office', role=CustomUser.Role.ADMIN))
        body = self.client.get(reverse('report_summary')).json()
        self.assertEqual(Decimal(body['total_billed']), Decimal('20000'))
        self.assertEqual(body['camp_types'][0]['camp_type'], 'summer')

    def test_export_csv_download(self):
        self.client.force_login(make_staff('acc1', role=CustomUser.Role.ACCOUNTS))
        response = self.client.get(reverse('export_csv'), {'payment_status': 'paid'})
        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment;', response['Content-Disposition'])
        rows = list(csv.reader(io.StringIO(response.content.decode('utf-8'))))
        self.assertEqual([row[0] for row in rows[1:]], [self.paid.registration_number])
