"""
billing/admin.py
────────────────
Admin for the billing escalation queue.
"""

from django.contrib import admin

from .models import BillingActionItem


@admin.register(BillingActionItem)
class BillingActionItemAdmin(admin.ModelAdmin):
    list_display    = ('child_name', 'parent_name', 'camp_type', 'action_type', 'amount_due',
                       'amount_paid', 'status', 'created_at', 'completed_by')
    list_filter     = ('status', 'action_type', 'camp_type', 'created_at')
    search_fields   = ('child_name', 'parent_name', 'email', 'phone',
                       'registration__registration_number')
    readonly_fields = ('registration', 'registration_type', 'child_name', 'parent_name', 'email',
                       'phone', 'camp_type', 'completed_at', 'completed_by', 'created_at',
                       'updated_at')
    date_hierarchy  = 'created_at'

    fieldsets = (
        (None, {
            'fields': ('registration', 'registration_type', 'child_name', 'camp_type'),
        }),
        ('Guardian', {
            'fields': ('parent_name', 'email', 'phone'),
        }),
        ('Follow-up', {
            'fields': ('action_type', 'amount_due', 'amount_paid', 'status', 'notes'),
        }),
        ('Resolution', {
            'fields': ('completed_at', 'completed_by', 'created_at', 'updated_at'),
        }),
    )
