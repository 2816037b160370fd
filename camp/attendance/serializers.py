"""
attendance/serializers.py
─────────────────────────
Attendance records with the registration context the gate needs.
"""


def attendance_as_dict(record):
    registration = record.registration
    return {
        'id':                  record.pk,
        'registration_id':     str(registration.pk),
        'registration_number': registration.registration_number,
        'parent_name':         registration.parent_name,
        'camp_type':           registration.camp_type,
        'payment_status':      registration.payment_status,
        'child_name':          record.child_name,
        'attendance_date':     record.attendance_date.isoformat(),
        'check_in_time':       record.check_in_time.isoformat(),
        'check_out_time':      record.check_out_time.isoformat() if record.check_out_time else None,
        'state':               record.state,
        'marked_by':           record.marked_by.username if record.marked_by else None,
        'notes':               record.notes,
    }
