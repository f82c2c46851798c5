"""
Image loading module.

Converts uploaded receipt images into data URLs
(``data:<mime>;base64,<payload>``). The payload is the exact uploaded
bytes; nothing is re-encoded.
"""

import base64
import binascii
import logging
import mimetypes
import re
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image, UnidentifiedImageError

from parking_ocr.errors import ReadError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^;,]*)*?);base64,(?P<payload>.*)$", re.DOTALL)

ImageSource = Union[bytes, bytearray, str, Path, BinaryIO]


def load_image(
    source: ImageSource,
    mime_type: Optional[str] = None,
    max_bytes: Optional[int] = None,
) -> str:
    """
    Read an image completely and return it as a data URL.

    Args:
        source: Raw bytes, a file path, or a readable binary file object
            (e.g. a Streamlit UploadedFile)
        mime_type: Declared MIME type; detected when omitted
        max_bytes: Optional upper bound on the file size

    Returns:
        Data URL embedding the original bytes

    Raises:
        ReadError: If the content cannot be read or is not a decodable image
    """
    content, name = _read_source(source)

    if max_bytes is not None and len(content) > max_bytes:
        raise ReadError(
            f"{name or 'file'} is {len(content)} bytes, larger than the {max_bytes} byte limit"
        )

    image_format = _verify_image(content, name)
    mime = (
        mime_type
        or getattr(source, "type", None)
        or _guess_mime_type(name, image_format)
    )
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{mime};base64,{payload}"


def _read_source(source: ImageSource) -> tuple[bytes, Optional[str]]:
    """Return the full content of the source and its file name, if any."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), None

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            return path.read_bytes(), path.name
        except OSError as e:
            raise ReadError(f"Could not read {path}: {e}") from e

    name = getattr(source, "name", None)
    try:
        if hasattr(source, "getvalue"):
            content = source.getvalue()
        else:
            if hasattr(source, "seek"):
                source.seek(0)
            content = source.read()
    except (OSError, ValueError) as e:
        raise ReadError(f"Could not read {name or 'upload'}: {e}") from e

    if not isinstance(content, (bytes, bytearray)):
        raise ReadError(f"{name or 'upload'} did not return binary content")
    return bytes(content), name


def _verify_image(content: bytes, name: Optional[str]) -> Optional[str]:
    """
    Check that Pillow can decode the content and return its format.

    Raises:
        ReadError: If the content is not a readable image
    """
    try:
        with Image.open(BytesIO(content)) as image:
            image_format = image.format
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ReadError(f"{name or 'upload'} is not a readable image: {e}") from e
    return image_format


def _guess_mime_type(name: Optional[str], image_format: Optional[str]) -> str:
    """Guess the MIME type from the file name, then from the decoded format."""
    if name:
        guessed, _ = mimetypes.guess_type(name)
        if guessed:
            return guessed

    if image_format:
        return Image.MIME.get(image_format, DEFAULT_MIME_TYPE)

    logger.debug(f"Could not identify image format for {name or 'upload'}")
    return DEFAULT_MIME_TYPE


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """
    Split a data URL into its MIME type and decoded bytes.

    Raises:
        ReadError: If the value is not a base64 data URL
    """
    match = _DATA_URL_RE.match(data_url or "")
    if not match:
        raise ReadError("Not a base64 data URL")

    try:
        content = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ReadError(f"Invalid base64 payload: {e}") from e

    return match.group("mime").lower() or DEFAULT_MIME_TYPE, content


def data_url_mime_type(data_url: str) -> str:
    """Return the declared MIME type of a data URL without decoding it."""
    match = _DATA_URL_RE.match(data_url or "")
    if not match:
        return DEFAULT_MIME_TYPE
    return match.group("mime").lower() or DEFAULT_MIME_TYPE
