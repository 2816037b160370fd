"""
bookings/qr.py
──────────────
Renders a registration's identity token as a scannable QR code.
"""

import base64
import io

import qrcode


def qr_png_bytes(token, box_size=7):
    """Build a QR code for *token* and return the raw PNG bytes."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=4,
    )
    qr.add_data(token)
    qr.make(fit=True)

    img = qr.make_image(fill_color='black', back_color='white')
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue()


def render_qr_png(token, box_size=7):
    """Same image as qr_png_bytes(), base64-encoded for JSON / <img src="data:...">."""
    return base64.b64encode(qr_png_bytes(token, box_size=box_size)).decode('utf-8')
