"""
OCR extraction module using Tesseract.

The pipeline depends only on the TextExtractor protocol, so another OCR
engine can be swapped in without touching the parser or the store.
"""

import logging
import time
from io import BytesIO
from typing import Optional, Protocol

import numpy as np
import pytesseract
from PIL import Image, UnidentifiedImageError

from parking_ocr.config import TesseractConfig, get_config
from parking_ocr.errors import ReadError, RecognitionError
from parking_ocr.images.loader import decode_data_url
from parking_ocr.ocr.preprocessor import ImagePreprocessor, PreprocessingLevel

logger = logging.getLogger(__name__)


class TextExtractor(Protocol):
    """Recognizes text in an embedded image."""

    def recognize(self, image: str, language: Optional[str] = None) -> str:
        """
        Return the raw text found in a data URL image.

        Raises:
            RecognitionError: If recognition fails
        """
        ...


class TesseractExtractor:
    """
    Extracts text from receipt images using Tesseract OCR.

    Calls are synchronous and have no timeout.
    """

    def __init__(
        self,
        tesseract_config: Optional[TesseractConfig] = None,
        preprocessing_level: PreprocessingLevel = PreprocessingLevel.NONE,
    ):
        """
        Initialize the OCR extractor.

        Args:
            tesseract_config: Tesseract configuration (uses default if not provided)
            preprocessing_level: Level of image preprocessing to apply
        """
        self.config = tesseract_config or get_config().tesseract
        self.preprocessor = ImagePreprocessor(level=preprocessing_level)

        # Set Tesseract command path if configured
        if self.config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.config.tesseract_cmd

    def recognize(self, image: str, language: Optional[str] = None) -> str:
        start_time = time.time()
        language = language or self.config.language

        try:
            _, content = decode_data_url(image)
            pil_image = Image.open(BytesIO(content))
            # Force load the image data (some formats are lazy-loaded)
            pil_image.load()
        except (ReadError, UnidentifiedImageError, OSError) as e:
            raise RecognitionError(f"Image could not be decoded for OCR: {e}") from e

        result = self.preprocessor.preprocess(pil_image)
        logger.debug(f"Preprocessing: {', '.join(result.messages)}")

        try:
            text = pytesseract.image_to_string(
                np.array(result.image),
                lang=language,
                config=self.config.get_config_string(),
            )
        except pytesseract.TesseractNotFoundError as e:
            raise RecognitionError(f"Tesseract not found: {e}") from e
        except (pytesseract.TesseractError, RuntimeError, OSError) as e:
            raise RecognitionError(f"OCR extraction error: {e}") from e

        logger.debug(
            f"Recognized {len(text)} characters in {time.time() - start_time:.2f}s"
        )
        if not text.strip():
            logger.warning("OCR produced empty result - image may be blank or unreadable")
        return text
