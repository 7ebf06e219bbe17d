"""QR codes for the calendar's share footer."""

from __future__ import annotations

import io
import logging

import qrcode
from qrcode.constants import ERROR_CORRECT_M

logger = logging.getLogger(__name__)

PROJECT_URL = "https://github.com/astoltz/school-lunch-menu"


def qr_png(url: str, box_size: int = 4) -> bytes:
    """Encode ``url`` as a PNG QR code (error correction level M)."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=box_size)
    qr.add_data(url)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    png = buffer.getvalue()
    logger.debug("QR code for %s: %d bytes", url, len(png))
    return png
