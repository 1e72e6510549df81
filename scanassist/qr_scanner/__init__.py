# scanassist/qr_scanner/__init__.py

"""
QR image scanner.

Exposes a high-level function:

    process_qr_image(image_bytes: bytes) -> dict

which:
- Decodes one or more QR codes in an image
- Classifies each payload into actions (URL, WiFi, contact, email, ...)
- Reports an unreadable image as a result, not an exception
"""

from .qr_engine import decode_image, decode_qr_opencv, process_qr_image
