"""
billing/serializers.py
──────────────────────
Plain-dict views of billing action items for the JSON endpoints.
"""


def action_item_as_dict(item):
    return {
        'id':                  item.pk,
        'registration_id':     str(item.registration_id),
        'registration_number': item.registration.registration_number,
        'child_name':          item.child_name,
        'parent_name':         item.parent_name,
        'email':               item.email,
        'phone':               item.phone,
        'action_type':         item.action_type,
        'amount_due':          str(item.amount_due),
        'amount_paid':         str(item.amount_paid),
        'camp_type':           item.camp_type,
        'status':              item.status,
        'notes':               item.notes,
        'completed_at':        item.completed_at.isoformat() if item.completed_at else None,
        'completed_by':        item.completed_by.username if item.completed_by else None,
        'created_at':          item.created_at.isoformat(),
    }
