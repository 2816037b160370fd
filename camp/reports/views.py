"""
reports/views.py
────────────────
Finance overview and exports for admin / accounts staff.
"""

from django.http import HttpResponse, JsonResponse
from django.utils import timezone

from accounts.models import CustomUser
from bookings import services as bookings
from core.utils import handles_camp_errors, parse_date_param, staff_required

from . import services

REPORT_ROLES = (CustomUser.Role.ADMIN, CustomUser.Role.ACCOUNTS)


def _filters(req):
    return {
        'camp_type': req.GET.get('camp_type') or None,
        'start':     parse_date_param(req.GET.get('start'), 'start'),
        'end':       parse_date_param(req.GET.get('end'), 'end'),
    }


def _money(value):
    return str(value)


@staff_required(*REPORT_ROLES)
@handles_camp_errors
def summary_view(req):
    filters = _filters(req)
    summary = services.revenue_summary(**filters)
    breakdown = services.camp_type_breakdown(start=filters['start'], end=filters['end'])
    return JsonResponse({
        'registrations':         summary['registrations'],
        'children':              summary['children'],
        'cancelled':             summary['cancelled'],
        'total_billed':          _money(summary['total_billed']),
        'amount_collected':      _money(summary['amount_collected']),
        'amount_outstanding':    _money(summary['amount_outstanding']),
        'revenue_by_status':     {k: _money(v) for k, v in summary['revenue_by_status'].items()},
        'registrations_by_camp': summary['registrations_by_camp'],
        'camp_types': [
            {**row, **{key: _money(row[key]) for key in ('total_billed', 'paid_total', 'collected')}}
            for row in breakdown
        ],
    })


def _export_queryset(req):
    filters = _filters(req)
    return bookings.list_registrations(
        camp_type=filters['camp_type'],
        payment_status=req.GET.get('payment_status') or None,
        status=req.GET.get('status') or None,
        start=filters['start'],
        end=filters['end'],
    )


@staff_required(*REPORT_ROLES)
@handles_camp_errors
def export_csv_view(req):
    renderer = services.CsvRenderer()
    document = services.export_registrations(_export_queryset(req), renderer)
    filename = f"registrations-{timezone.localdate().isoformat()}.{renderer.extension}"
    response = HttpResponse(document, content_type=renderer.content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@staff_required(*REPORT_ROLES)
@handles_camp_errors
def export_qr_codes_view(req):
    archive = services.export_qr_codes(_export_queryset(req))
    response = HttpResponse(archive, content_type='application/zip')
    response['Content-Disposition'] = 'attachment; filename="qr-codes.zip"'
    return response
