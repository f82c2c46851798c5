"""OCR module for image preprocessing and text extraction."""

from .preprocessor import ImagePreprocessor, PreprocessingLevel
from .extractor import TesseractExtractor, TextExtractor

__all__ = ["ImagePreprocessor", "PreprocessingLevel", "TesseractExtractor", "TextExtractor"]
