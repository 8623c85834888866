"""Navigable object model over document-analysis (OCR) block records."""

from docmodel.models import Document

__all__ = ["Document"]
