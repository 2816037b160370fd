"""
attendance/admin.py
───────────────────
Admin for attendance records.
"""

from django.contrib import admin

from .models import AttendanceRecord


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display    = ('child_name', 'registration', 'attendance_date', 'check_in_time',
                       'check_out_time', 'marked_by')
    list_filter     = ('attendance_date', 'registration__camp_type')
    search_fields   = ('child_name', 'registration__registration_number', 'registration__parent_name')
    readonly_fields = ('registration', 'child_name', 'attendance_date', 'check_in_time',
                       'marked_by', 'created_at')
    date_hierarchy  = 'attendance_date'
