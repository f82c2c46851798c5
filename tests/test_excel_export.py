from io import BytesIO

import pytest
from openpyxl import load_workbook

from parking_ocr.config import ExportConfig
from parking_ocr.errors import ExportError
from parking_ocr.export.excel import ExcelExporter, export_records
from parking_ocr.models.record import NOT_FOUND, ParsedRecord
from parking_ocr.storage.backends import JsonFileStorage
from parking_ocr.storage.store import RecordStore


@pytest.fixture
def exporter():
    return ExcelExporter(ExportConfig())


@pytest.fixture
def records(png_data_url, jpeg_data_url):
    return [
        ParsedRecord(image=jpeg_data_url, date="01/01/24 08:00", cost="$3.50"),
        ParsedRecord(image=png_data_url, date="15/01/24", cost=NOT_FOUND),
    ]


def test_two_records_give_header_plus_two_rows(exporter, records) -> None:
    wb = load_workbook(BytesIO(exporter.export(records)))
    ws = wb["Parking Data"]

    assert ws.max_row == 3
    assert [c.value for c in ws[1]] == ["Image", "Date", "Cost"]
    assert (ws["B2"].value, ws["C2"].value) == ("01/01/24 08:00", "$3.50")
    assert (ws["B3"].value, ws["C3"].value) == ("15/01/24", NOT_FOUND)


def test_images_are_anchored_to_their_rows(exporter, records) -> None:
    ws = exporter.build_workbook(records).active

    assert [image.anchor for image in ws._images] == ["A2", "A3"]
    assert all((image.width, image.height) == (150, 100) for image in ws._images)
    assert ws.row_dimensions[2].height == 80
    assert ws.row_dimensions[3].height == 80


def test_images_survive_saving(exporter, records) -> None:
    ws = load_workbook(BytesIO(exporter.export(records))).active

    assert len(ws._images) == 2
    assert sorted(image.anchor._from.row for image in ws._images) == [1, 2]


def test_image_format_follows_declared_type(exporter, records, gif_data_url) -> None:
    records = records + [ParsedRecord(image=gif_data_url)]

    ws = exporter.build_workbook(records).active

    assert [image.format for image in ws._images] == ["jpeg", "png", "png"]


def test_column_widths(exporter, records) -> None:
    ws = exporter.build_workbook(records).active

    assert ws.column_dimensions["A"].width == 20
    assert ws.column_dimensions["B"].width == 25
    assert ws.column_dimensions["C"].width == 15


def test_empty_export_has_only_header(exporter) -> None:
    ws = load_workbook(BytesIO(exporter.export([]))).active

    assert ws.max_row == 1


def test_unreadable_image_raises_export_error(exporter) -> None:
    with pytest.raises(ExportError):
        exporter.export([ParsedRecord(image="data:image/png;base64,AAAA")])


def test_non_data_url_raises_export_error(exporter) -> None:
    with pytest.raises(ExportError):
        exporter.export([ParsedRecord(image="receipt.png")])


def test_export_to_file_adds_extension(exporter, records, tmp_path) -> None:
    path = exporter.export_to_file(records, tmp_path / "parking_data")

    assert path.name == "parking_data.xlsx"
    assert load_workbook(path).active.max_row == 3


def test_export_records_uses_global_layout(records) -> None:
    ws = load_workbook(BytesIO(export_records(records))).active

    assert ws.title == "Parking Data"
    assert ws.max_row == 3


def test_failed_export_leaves_store_untouched(exporter, png_data_url, tmp_path) -> None:
    storage = JsonFileStorage(tmp_path)
    store = RecordStore(storage)
    stored = [
        ParsedRecord(image=png_data_url, date="01/01/24", cost="$1.00"),
        ParsedRecord(image="data:image/png;base64,AAAA", date="02/01/24", cost="$2.00"),
    ]
    store.replace(stored)
    slot_before = storage.path.read_bytes()

    with pytest.raises(ExportError):
        exporter.export(store.current())

    assert store.current() == stored
    assert storage.path.read_bytes() == slot_before
    assert RecordStore(JsonFileStorage(tmp_path)).current() == stored
