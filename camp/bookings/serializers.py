"""
bookings/serializers.py
───────────────────────
Plain-dict views of bookings for the JSON endpoints.
"""


def child_as_dict(child):
    return {
        'child_name':     child.child_name,
        'date_of_birth':  child.date_of_birth.isoformat(),
        'age_range':      child.age_range,
        'special_needs':  child.special_needs,
        'selected_dates': [day.isoformat() for day in child.selected_dates],
        'session_types':  dict(child.session_types),
        'price':          str(child.price),
    }


def registration_as_dict(registration, include_children=True):
    data = {
        'id':                  str(registration.id),
        'registration_number': registration.registration_number,
        'camp_type':           registration.camp_type,
        'parent_name':         registration.parent_name,
        'email':               registration.email,
        'phone':               registration.phone,
        'emergency_contact':   registration.emergency_contact,
        'total_amount':        str(registration.total_amount),
        'amount_paid':         str(registration.amount_paid),
        'payment_status':      registration.payment_status,
        'payment_method':      registration.payment_method,
        'payment_reference':   registration.payment_reference,
        'registration_type':   registration.registration_type,
        'status':              registration.status,
        'created_at':          registration.created_at.isoformat(),
    }
    if include_children:
        data['children'] = [child_as_dict(child) for child in registration.children.all()]
    return data
