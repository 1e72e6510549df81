# scanassist/__init__.py

"""Scan classification service: raw OCR/QR text in, typed actions out."""

__version__ = "0.1.0"
