"""
Parking Receipt OCR - scan parking receipts and export them to Excel.

This package provides functionality for:
- OCR extraction of receipt images with Tesseract
- Date and cost extraction from recognized text
- Local persistence of scanned records
- Excel export with embedded receipt thumbnails
"""

__version__ = "0.1.0"
__author__ = "Parking Receipt OCR"
