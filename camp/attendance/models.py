"""
attendance/models.py
────────────────────
AttendanceRecord – one child's presence on one camp day.

absent (no row) → checked in (check_in_time) → checked out (check_out_time).
Check-out updates the same row; the database refuses a second row for the
same (registration, child, day).
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class AttendanceRecord(models.Model):

    registration = models.ForeignKey(
        'bookings.Registration',
        on_delete=models.PROTECT,
        related_name='attendance_records',
    )
    child_name = models.CharField(max_length=200)
    attendance_date = models.DateField(default=timezone.localdate)
    check_in_time = models.DateTimeField(default=timezone.now)
    check_out_time = models.DateTimeField(null=True, blank=True)
    marked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='marked_attendance',
        help_text='Staff member who checked the child in.',
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-attendance_date', 'check_in_time']
        verbose_name = 'Attendance Record'
        verbose_name_plural = 'Attendance Records'
        constraints = [
            models.UniqueConstraint(
                fields=['registration', 'child_name', 'attendance_date'],
                name='unique_daily_attendance_per_child',
            ),
        ]

    def __str__(self):
        return f"{self.child_name} – {self.attendance_date.isoformat()} ({self.state})"

    @property
    def is_checked_out(self):
        return self.check_out_time is not None

    @property
    def state(self):
        return 'checked_out' if self.is_checked_out else 'checked_in'
