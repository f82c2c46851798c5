"""
Image preprocessing module for OCR optimization.

Receipt photos are often dim or noisy. Enhancements here only affect the
image handed to Tesseract; the stored receipt image is never modified.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import cv2
import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


class PreprocessingLevel(Enum):
    """Level of preprocessing to apply."""
    NONE = "none"          # Recognize the upload as-is
    LIGHT = "light"        # Grayscale and contrast enhancement
    STANDARD = "standard"  # Light plus denoise and threshold

    @classmethod
    def from_name(cls, name: str) -> "PreprocessingLevel":
        """Resolve a level from its value, falling back to NONE."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            logger.warning(f"Unknown preprocessing level {name!r}, using 'none'")
            return cls.NONE


@dataclass
class PreprocessingResult:
    """Result of image preprocessing."""
    image: Image.Image
    original_size: tuple[int, int]
    processed_size: tuple[int, int]
    preprocessing_level: PreprocessingLevel
    messages: list[str] = field(default_factory=list)


class ImagePreprocessor:
    """
    Preprocesses receipt images before recognition.

    Higher levels may improve OCR on poor photos but take longer.
    """

    def __init__(
        self,
        level: PreprocessingLevel = PreprocessingLevel.NONE,
        max_dimension: int = 4000,
    ):
        """
        Initialize the image preprocessor.

        Args:
            level: Preprocessing intensity level
            max_dimension: Maximum image dimension to prevent memory issues
        """
        self.level = level
        self.max_dimension = max_dimension

    def preprocess(self, image: Image.Image) -> PreprocessingResult:
        """
        Preprocess an image for OCR.

        Args:
            image: Loaded PIL image

        Returns:
            PreprocessingResult with processed image and metadata
        """
        image = self._to_compatible_mode(image)
        original_size = image.size
        messages = []

        if self.level == PreprocessingLevel.NONE:
            messages.append("No preprocessing applied")
            return PreprocessingResult(
                image=image,
                original_size=original_size,
                processed_size=original_size,
                preprocessing_level=self.level,
                messages=messages,
            )

        if image.mode == "L":
            gray = np.array(image)
        else:
            gray = cv2.cvtColor(np.array(image.convert("RGB")), cv2.COLOR_RGB2GRAY)
            messages.append("Converted to grayscale")

        gray = self._resize_if_needed(gray, messages)

        gray = self._enhance_contrast(gray)
        messages.append("Applied contrast enhancement")

        if self.level == PreprocessingLevel.STANDARD:
            gray = self._remove_noise(gray)
            messages.append("Applied noise reduction")

            gray = self._apply_threshold(gray)
            messages.append("Applied Otsu thresholding")

        processed = Image.fromarray(gray)
        return PreprocessingResult(
            image=processed,
            original_size=original_size,
            processed_size=processed.size,
            preprocessing_level=self.level,
            messages=messages,
        )

    @staticmethod
    def _to_compatible_mode(image: Image.Image) -> Image.Image:
        """Flatten transparency and palettes so Tesseract can read the image."""
        if image.mode in ("RGB", "L", "1"):
            return image
        if image.mode in ("RGBA", "LA"):
            # White background for transparent receipts
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.getchannel("A"))
            return background
        return image.convert("RGB")

    def _resize_if_needed(self, gray: np.ndarray, messages: list) -> np.ndarray:
        """Resize image if it exceeds maximum dimensions."""
        height, width = gray.shape[:2]

        if max(height, width) > self.max_dimension:
            scale = self.max_dimension / max(height, width)
            new_width = int(width * scale)
            new_height = int(height * scale)
            gray = cv2.resize(gray, (new_width, new_height), interpolation=cv2.INTER_AREA)
            messages.append(f"Resized from {width}x{height} to {new_width}x{new_height}")

        return gray

    def _enhance_contrast(self, gray: np.ndarray) -> np.ndarray:
        """Enhance image contrast using CLAHE."""
        clahe = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
        return clahe.apply(gray)

    def _remove_noise(self, gray: np.ndarray) -> np.ndarray:
        """Remove noise using bilateral filter (preserves edges)."""
        return cv2.bilateralFilter(gray, 9, 75, 75)

    def _apply_threshold(self, gray: np.ndarray) -> np.ndarray:
        _, binary = cv2.threshold(
            gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU
        )
        return binary
