"""
communications/views.py
────────────────────────
Notification log for the accounts team.
"""

from django.http import JsonResponse

from accounts.models import CustomUser
from core.utils import handles_camp_errors, staff_required

from .models import NotificationLog

LOG_LIMIT = 200


@staff_required(CustomUser.Role.ADMIN, CustomUser.Role.ACCOUNTS)
@handles_camp_errors
def notification_log_view(req):
    """GET ?type=billing_alert&failed=1: most recent notifications first."""
    logs = NotificationLog.objects.select_related('registration')
    if req.GET.get('type'):
        logs = logs.filter(notification_type=req.GET['type'])
    if req.GET.get('failed'):
        logs = logs.filter(success=False)
    return JsonResponse({
        'notifications': [
            {
                'id':                  log.pk,
                'notification_type':   log.notification_type,
                'recipients':          log.recipients,
                'subject':             log.subject,
                'registration_number': log.registration.registration_number if log.registration else None,
                'sent_at':             log.sent_at.isoformat(),
                'success':             log.success,
                'error_message':       log.error_message,
            }
            for log in logs[:LOG_LIMIT]
        ],
    })
