"""
Excel export module for parking receipts.

Handles:
- One row per receipt with date and cost
- Receipt thumbnail anchored in the first column of its row
- Header formatting and fixed row heights
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional, Union

from openpyxl import Workbook
from openpyxl.drawing.image import Image as XLImage
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from PIL import Image, UnidentifiedImageError

from parking_ocr.config import ExportConfig, get_config
from parking_ocr.errors import ExportError, ReadError
from parking_ocr.images.loader import decode_data_url
from parking_ocr.models.record import ParsedRecord

logger = logging.getLogger(__name__)

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Declared types embedded without conversion
_JPEG_TYPES = {"image/jpeg", "image/jpg", "image/pjpeg"}
_PNG_TYPES = {"image/png"}


class ExcelExporter:
    """
    Exports parsed receipts to an Excel workbook.

    Row 1 holds the headers; receipt ``i`` lands on row ``i + 2`` with
    its image scaled to a fixed thumbnail size.
    """

    HEADERS = ["Image", "Date", "Cost"]

    COLUMN_WIDTHS = {
        "A": 20,  # Image
        "B": 25,  # Date
        "C": 15,  # Cost
    }

    def __init__(self, export_config: Optional[ExportConfig] = None):
        """Initialize the Excel exporter."""
        self.config = export_config or get_config().export
        self._setup_styles()

    def _setup_styles(self):
        """Set up Excel styles for formatting."""
        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(start_color="1976D2", end_color="1976D2", fill_type="solid")
        self.header_alignment = Alignment(horizontal="center", vertical="center")
        self.cell_alignment = Alignment(vertical="center")

        thin_border = Side(style="thin", color="CCCCCC")
        self.cell_border = Border(
            left=thin_border,
            right=thin_border,
            top=thin_border,
            bottom=thin_border,
        )

    def build_workbook(self, records: Iterable[ParsedRecord]) -> Workbook:
        """
        Build the workbook for the given records in store order.

        Raises:
            ExportError: If a record image cannot be embedded
        """
        wb = Workbook()
        ws = wb.active
        ws.title = self.config.sheet_title

        self._write_headers(ws)

        count = 0
        for i, record in enumerate(records):
            row_num = i + 2
            self._write_row(ws, row_num, record)
            ws.add_image(self._thumbnail(record, row_num), f"A{row_num}")
            ws.row_dimensions[row_num].height = self.config.row_height
            count += 1

        for col_letter, width in self.COLUMN_WIDTHS.items():
            ws.column_dimensions[col_letter].width = width

        logger.debug(f"Built workbook with {count} receipts")
        return wb

    def export(self, records: Iterable[ParsedRecord]) -> bytes:
        """
        Export receipts to XLSX bytes, ready for download.

        Raises:
            ExportError: If the workbook cannot be built or serialized
        """
        records = list(records)
        wb = self.build_workbook(records)

        buffer = BytesIO()
        try:
            wb.save(buffer)
        except (OSError, ValueError, TypeError) as e:
            raise ExportError(f"Could not write spreadsheet: {e}") from e

        logger.info(f"Exported {len(records)} receipts to spreadsheet")
        return buffer.getvalue()

    def export_to_file(
        self,
        records: Iterable[ParsedRecord],
        file_path: Union[str, Path],
    ) -> Path:
        """
        Export receipts to an Excel file.

        Args:
            records: Parsed receipts in display order
            file_path: Path to Excel file

        Returns:
            Path to the exported file
        """
        file_path = Path(file_path)

        # Ensure .xlsx extension
        if file_path.suffix.lower() != ".xlsx":
            file_path = file_path.with_suffix(".xlsx")

        content = self.export(records)
        try:
            file_path.write_bytes(content)
        except OSError as e:
            raise ExportError(f"Could not write {file_path}: {e}") from e

        logger.info(f"Saved spreadsheet to {file_path}")
        return file_path

    def _write_headers(self, ws):
        """Write header row with formatting."""
        for col, header in enumerate(self.HEADERS, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.header_alignment
            cell.border = self.cell_border

        # Freeze header row
        ws.freeze_panes = "A2"

    def _write_row(self, ws, row_num: int, record: ParsedRecord):
        """Write the text cells of one receipt."""
        for col, value in ((2, record.date), (3, record.cost)):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.alignment = self.cell_alignment
            cell.border = self.cell_border

    def _thumbnail(self, record: ParsedRecord, row_num: int) -> XLImage:
        """Create the scaled image for one row."""
        try:
            mime_type, content = decode_data_url(record.image)
        except ReadError as e:
            raise ExportError(f"Receipt on row {row_num} has an unreadable image: {e}") from e

        try:
            if mime_type not in _JPEG_TYPES and mime_type not in _PNG_TYPES:
                content = self._convert_to_png(content)
            image = XLImage(BytesIO(content))
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ExportError(f"Receipt on row {row_num} could not be embedded: {e}") from e

        image.width = self.config.image_width
        image.height = self.config.image_height
        return image

    @staticmethod
    def _convert_to_png(content: bytes) -> bytes:
        """Re-encode an image of any other declared type as PNG."""
        with Image.open(BytesIO(content)) as source:
            if source.mode not in ("RGB", "RGBA", "L", "LA", "P", "1"):
                source = source.convert("RGBA")
            output = BytesIO()
            source.save(output, format="PNG")
        return output.getvalue()


def export_records(records: Iterable[ParsedRecord]) -> bytes:
    """
    Convenience function to export receipts to XLSX bytes.

    Args:
        records: Parsed receipts in display order

    Returns:
        Workbook content
    """
    exporter = ExcelExporter()
    return exporter.export(records)
