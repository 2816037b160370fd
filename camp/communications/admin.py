"""
communications/admin.py
────────────────────────
Admin for NotificationLog (read-only audit trail).
"""

from django.contrib import admin

from .models import NotificationLog


@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    list_display  = ('notification_type', 'channel', 'recipients', 'registration', 'sent_at', 'success')
    list_filter   = ('notification_type', 'channel', 'success', 'sent_at')
    search_fields = ('recipients', 'subject', 'registration__registration_number')
    readonly_fields = ('notification_type', 'channel', 'recipients', 'registration',
                       'subject', 'body_preview', 'success', 'error_message', 'sent_at')

    fieldsets = (
        (None, {
            'fields': ('notification_type', 'channel', 'recipients', 'registration'),
        }),
        ('Content', {
            'fields': ('subject', 'body_preview'),
        }),
        ('Result', {
            'fields': ('success', 'error_message', 'sent_at'),
        }),
    )

    def has_add_permission(self, request):
        return False
