from pathlib import Path

from parking_ocr.config import (
    AppConfig,
    StorageConfig,
    TesseractConfig,
    get_config,
    reset_config,
)


def test_defaults_match_export_layout() -> None:
    config = AppConfig()

    assert config.export.file_name == "parking_data.xlsx"
    assert (config.export.image_width, config.export.image_height) == (150, 100)
    assert config.export.row_height == 80
    assert config.tesseract.language == "eng"


def test_storage_dir_comes_from_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PARKING_OCR_DATA_DIR", str(tmp_path / "receipts"))
    monkeypatch.setenv("PARKING_OCR_STORAGE_KEY", "testSlot")

    storage = StorageConfig()

    assert storage.data_dir == Path(tmp_path / "receipts")
    assert storage.storage_key == "testSlot"


def test_storage_writability_check_creates_directory(tmp_path) -> None:
    storage = StorageConfig(data_dir=tmp_path / "new")

    writable, _ = storage.is_writable()

    assert writable
    assert (tmp_path / "new").is_dir()


def test_global_config_is_cached_and_resettable() -> None:
    first = get_config()
    assert get_config() is first

    reset_config()

    assert get_config() is not first


def test_missing_tesseract_reports_install_help(monkeypatch) -> None:
    monkeypatch.setattr(TesseractConfig, "find_tesseract", staticmethod(lambda: None))

    valid, message, version = TesseractConfig.validate_installation()

    assert not valid
    assert "brew install tesseract" in message
    assert version is None


def test_config_string() -> None:
    assert TesseractConfig(oem=1, psm=4).get_config_string() == "--oem 1 --psm 4"


def test_max_file_size_in_bytes() -> None:
    assert AppConfig(max_file_size_mb=2).max_file_size_bytes == 2 * 1024 * 1024
