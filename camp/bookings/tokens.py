"""
bookings/tokens.py
──────────────────
Identity token codec for the check-in QR code.

A token is the JSON string
    {"type": "camp_registration", "id": "<registration id>", "issuedAt": <ms>}

It carries no signature: whoever holds the string can resolve the
registration.  Staff authentication at the gate is what authorises acting on
it, never the token itself.
"""

import json
import math
from dataclasses import dataclass

from django.utils import timezone

TOKEN_TYPE = 'camp_registration'


@dataclass(frozen=True)
class DecodedToken:
    id: str
    issued_at: int


def encode(registration_id, issued_at=None):
    """Mint the token for *registration_id*; ``issued_at`` is epoch millis."""
    if issued_at is None:
        issued_at = int(timezone.now().timestamp() * 1000)
    return json.dumps(
        {'type': TOKEN_TYPE, 'id': str(registration_id), 'issuedAt': issued_at},
        separators=(',', ':'),
    )


def decode(token):
    """
    Return a DecodedToken, or None for anything that is not one of ours.
    Never raises, whatever the input.
    """
    if not isinstance(token, (str, bytes, bytearray)):
        return None
    try:
        payload = json.loads(token)
    except (ValueError, RecursionError):
        return None
    if not isinstance(payload, dict) or payload.get('type') != TOKEN_TYPE:
        return None

    registration_id = payload.get('id')
    issued_at = payload.get('issuedAt')
    if not isinstance(registration_id, str) or not registration_id.strip():
        return None
    # bool is an int subclass; a JSON true is not a timestamp.
    if isinstance(issued_at, bool) or not isinstance(issued_at, (int, float)):
        return None
    if isinstance(issued_at, float) and not math.isfinite(issued_at):
        return None
    return DecodedToken(id=registration_id, issued_at=int(issued_at))
