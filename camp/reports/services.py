"""
reports/services.py
───────────────────
Read-only aggregation over registrations, plus the export hand-off.

Functions
─────────
revenue_summary(camp_type=None, start=None, end=None)
    Totals for the finance overview: billed, collected, outstanding, split by
    payment status and camp type.  Cancelled bookings are counted but carry
    no revenue.

camp_type_breakdown(...) / registration_details(...)
    Per-camp and per-registration listings.

export_rows(registrations) / export_registrations(registrations, renderer)
    Row-oriented data for a document renderer.  A renderer failure is raised
    as ExportRenderingError: the caller asked for a document and must know.

export_qr_codes(registrations)
    ZIP archive with one QR PNG per registration, named by registration number.
"""

import csv
import io
import logging
import zipfile
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.utils import timezone

from bookings.models import CampType, Registration
from bookings.qr import qr_png_bytes
from bookings.serializers import registration_as_dict
from core.exceptions import ExportRenderingError

logger = logging.getLogger(__name__)

ZERO = Decimal('0')

EXPORT_COLUMNS = (
    'Registration Number',
    'Parent Name',
    'Email',
    'Phone',
    'Camp Type',
    'Children Count',
    'Total Amount',
    'Payment Status',
    'Payment Method',
    'Registration Type',
    'Date Created',
)


def _registrations(camp_type=None, start=None, end=None):
    qs = Registration.objects.all()
    if camp_type:
        qs = qs.filter(camp_type=camp_type)
    if start:
        qs = qs.filter(created_at__date__gte=start)
    if end:
        qs = qs.filter(created_at__date__lte=end)
    return qs


# ── Summaries ─────────────────────────────────────────────────────────────────

def revenue_summary(camp_type=None, start=None, end=None):
    qs = _registrations(camp_type, start, end)
    cancelled = qs.filter(status=Registration.Status.CANCELLED).count()
    live = qs.exclude(status=Registration.Status.CANCELLED)

    totals = live.aggregate(
        registrations=Count('id', distinct=True),
        billed=Sum('total_amount'),
        collected=Sum('amount_paid'),
    )
    children = live.aggregate(n=Count('children'))['n'] or 0
    billed = totals['billed'] or ZERO
    collected = totals['collected'] or ZERO

    by_status = {status: ZERO for status in Registration.PaymentStatus.values}
    for row in live.values('payment_status').annotate(s=Sum('total_amount')):
        by_status[row['payment_status']] = row['s'] or ZERO

    by_camp = {
        row['camp_type']: row['n']
        for row in live.values('camp_type').annotate(n=Count('id')).order_by('camp_type')
    }

    return {
        'registrations':         totals['registrations'] or 0,
        'children':              children,
        'cancelled':             cancelled,
        'total_billed':          billed,
        'revenue_by_status':     by_status,
        'amount_collected':      collected,
        'amount_outstanding':    billed - collected,
        'registrations_by_camp': by_camp,
    }


def camp_type_breakdown(start=None, end=None):
    """One row per camp type that has at least one live registration."""
    live = _registrations(start=start, end=end).exclude(status=Registration.Status.CANCELLED)
    paid = Q(payment_status=Registration.PaymentStatus.PAID)
    rows = (
        live.values('camp_type')
        .annotate(
            registrations=Count('id'),
            total_billed=Sum('total_amount'),
            paid_total=Sum('total_amount', filter=paid),
            collected=Sum('amount_paid'),
        )
        .order_by('camp_type')
    )
    child_counts = dict(
        live.values('camp_type').annotate(n=Count('children')).values_list('camp_type', 'n')
    )
    labels = dict(CampType.choices)
    return [
        {
            'camp_type':     row['camp_type'],
            'label':         labels.get(row['camp_type'], row['camp_type']),
            'registrations': row['registrations'],
            'children':      child_counts.get(row['camp_type'], 0),
            'total_billed':  row['total_billed'] or ZERO,
            'paid_total':    row['paid_total'] or ZERO,
            'collected':     row['collected'] or ZERO,
        }
        for row in rows
    ]


def registration_details(camp_type=None, start=None, end=None):
    qs = (
        _registrations(camp_type, start, end)
        .prefetch_related('children')
        .order_by('-created_at')
    )
    return [registration_as_dict(registration) for registration in qs]


# ── Export ────────────────────────────────────────────────────────────────────

def export_rows(registrations):
    rows = []
    for registration in registrations:
        rows.append([
            registration.registration_number,
            registration.parent_name,
            registration.email,
            registration.phone,
            registration.camp_type,
            len(registration.children.all()),
            registration.total_amount,
            registration.payment_status,
            registration.payment_method,
            registration.registration_type,
            timezone.localtime(registration.created_at).isoformat(),
        ])
    return rows


class CsvRenderer:
    """Built-in renderer: UTF-8 CSV, header row first, every cell quoted."""

    content_type = 'text/csv; charset=utf-8'
    extension = 'csv'

    def render(self, columns, rows):
        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
        writer.writerow(columns)
        writer.writerows(rows)
        return buf.getvalue().encode('utf-8')


def export_registrations(registrations, renderer=None):
    """Hand the export rows to *renderer* (CSV by default) and return its document."""
    renderer = renderer or CsvRenderer()
    rows = export_rows(registrations)
    try:
        document = renderer.render(EXPORT_COLUMNS, rows)
    except Exception as exc:
        logger.exception(f"Export rendering failed for {len(rows)} registration(s)")
        raise ExportRenderingError(f"Could not render export: {exc}") from exc
    logger.info(f"Exported {len(rows)} registration(s) with {type(renderer).__name__}")
    return document


def export_qr_codes(registrations):
    """ZIP bytes holding ``<registration_number>_QR.png`` per registration."""
    buf = io.BytesIO()
    count = 0
    try:
        with zipfile.ZipFile(buf, 'w', zipfile.ZIP_DEFLATED) as archive:
            for registration in registrations:
                name = registration.registration_number or str(registration.pk)
                archive.writestr(f"{name}_QR.png", qr_png_bytes(registration.identity_token, box_size=10))
                count += 1
    except Exception as exc:
        logger.exception("QR code export failed")
        raise ExportRenderingError(f"Could not build QR archive: {exc}") from exc
    logger.info(f"Exported {count} QR code(s)")
    return buf.getvalue()
