"""Shared pytest fixtures for parking receipt tests."""

from __future__ import annotations

import base64
from io import BytesIO

import pytest
from PIL import Image

from parking_ocr import config as config_module
from parking_ocr.errors import RecognitionError


def _image_bytes(fmt: str, color: tuple[int, int, int] = (200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (8, 6), color=color).save(buffer, format=fmt)
    return buffer.getvalue()


def _data_url(mime: str, content: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point storage at a temp dir and rebuild the global config per test."""
    monkeypatch.setenv("PARKING_OCR_DATA_DIR", str(tmp_path / "data"))
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def png_bytes() -> bytes:
    return _image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _image_bytes("JPEG", color=(30, 30, 200))


@pytest.fixture
def gif_bytes() -> bytes:
    return _image_bytes("GIF")


@pytest.fixture
def png_data_url(png_bytes) -> str:
    return _data_url("image/png", png_bytes)


@pytest.fixture
def jpeg_data_url(jpeg_bytes) -> str:
    return _data_url("image/jpeg", jpeg_bytes)


@pytest.fixture
def gif_data_url(gif_bytes) -> str:
    return _data_url("image/gif", gif_bytes)


class FakeExtractor:
    """Returns canned text per call, in order; an exception entry is raised."""

    def __init__(self, outputs):
        self.outputs = list(outputs)
        self.calls: list[tuple[str, str | None]] = []

    def recognize(self, image: str, language: str | None = None) -> str:
        self.calls.append((image, language))
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


@pytest.fixture
def fake_extractor_factory():
    return FakeExtractor


@pytest.fixture
def recognition_error():
    return RecognitionError("tesseract crashed")
