"""Export module for writing scanned receipts to Excel spreadsheets."""

from .excel import XLSX_MIME_TYPE, ExcelExporter, export_records

__all__ = ["XLSX_MIME_TYPE", "ExcelExporter", "export_records"]
