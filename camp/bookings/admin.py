"""
bookings/admin.py
─────────────────
Admin registrations for SessionDate, Registration and its Children.
"""

from django.contrib import admin

from .models import Child, Registration, SessionDate


@admin.register(SessionDate)
class SessionDateAdmin(admin.ModelAdmin):
    list_display  = ('camp_type', 'date', 'half_day_rate', 'full_day_rate', 'is_active')
    list_filter   = ('camp_type', 'is_active')
    date_hierarchy = 'date'


class ChildInline(admin.TabularInline):
    model = Child
    extra = 0
    fields = ('position', 'child_name', 'date_of_birth', 'age_range', 'special_needs',
              'session_types', 'price')
    readonly_fields = ('session_types', 'price')
    can_delete = False


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display    = ('registration_number', 'parent_name', 'camp_type', 'total_amount',
                       'payment_status', 'payment_method', 'registration_type', 'status',
                       'created_at')
    list_filter     = ('camp_type', 'payment_status', 'payment_method', 'registration_type', 'status')
    search_fields   = ('registration_number', 'parent_name', 'email', 'phone')
    readonly_fields = ('id', 'registration_number', 'identity_token', 'total_amount',
                       'consent_given', 'created_by', 'created_at', 'updated_at')
    inlines         = (ChildInline,)

    fieldsets = (
        (None, {
            'fields': ('id', 'registration_number', 'camp_type', 'status', 'registration_type'),
        }),
        ('Guardian', {
            'fields': ('parent_name', 'email', 'phone', 'emergency_contact', 'consent_given'),
        }),
        ('Payment', {
            'fields': ('total_amount', 'amount_paid', 'payment_status', 'payment_method',
                       'payment_reference'),
        }),
        ('Metadata', {
            'fields': ('identity_token', 'admin_notes', 'created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def has_delete_permission(self, request, obj=None):
        # Registrations are status-moved, never deleted.
        return False
