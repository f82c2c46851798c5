"""
Configuration module for Parking Receipt OCR.

Handles settings for Tesseract, OCR preprocessing, local record storage
and Excel export, with environment variable overrides.
"""

import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class TesseractConfig:
    """Configuration for Tesseract OCR engine."""
    tesseract_cmd: Optional[str] = None
    language: str = "eng"
    oem: int = 3  # OCR Engine Mode: 3 = Default, based on what is available
    psm: int = 6  # Page Segmentation Mode: 6 = Assume uniform block of text

    def get_config_string(self) -> str:
        """Generate Tesseract configuration string."""
        return f"--oem {self.oem} --psm {self.psm}"

    @staticmethod
    def find_tesseract() -> Optional[str]:
        """Attempt to find Tesseract installation."""
        common_paths = [
            "/usr/local/bin/tesseract",  # macOS Homebrew
            "/opt/homebrew/bin/tesseract",  # macOS M1/M2 Homebrew
            "/usr/bin/tesseract",  # Linux
            r"C:\Program Files\Tesseract-OCR\tesseract.exe",  # Windows
            r"C:\Program Files (x86)\Tesseract-OCR\tesseract.exe",  # Windows x86
        ]

        tesseract_path = shutil.which("tesseract")
        if tesseract_path:
            return tesseract_path

        for path in common_paths:
            if Path(path).exists():
                return path

        return None

    @staticmethod
    def validate_installation() -> tuple[bool, str, Optional[str]]:
        """
        Validate Tesseract installation.

        Returns:
            Tuple of (is_valid, message, version)
        """
        tesseract_path = TesseractConfig.find_tesseract()

        if not tesseract_path:
            return False, (
                "Tesseract OCR is not installed or not found in PATH.\n\n"
                "Installation instructions:\n"
                "• macOS: brew install tesseract\n"
                "• Ubuntu/Debian: sudo apt install tesseract-ocr\n"
                "• Windows: Download from https://github.com/UB-Mannheim/tesseract/wiki\n"
            ), None

        try:
            result = subprocess.run(
                [tesseract_path, "--version"],
                capture_output=True,
                text=True,
                timeout=10
            )
        except subprocess.TimeoutExpired:
            return False, "Tesseract command timed out", None
        except OSError as e:
            return False, f"Error validating Tesseract: {e}", None

        if result.returncode == 0:
            version_info = result.stdout.split('\n')[0]
            return True, f"Tesseract found: {version_info}", version_info
        return False, f"Tesseract found but returned error: {result.stderr}", None


def _default_data_dir() -> Path:
    return Path(os.getenv("PARKING_OCR_DATA_DIR", str(Path.home() / ".parking_ocr")))


@dataclass
class StorageConfig:
    """Configuration for the local record storage slot."""
    data_dir: Path = field(default_factory=_default_data_dir)
    storage_key: str = field(
        default_factory=lambda: os.getenv("PARKING_OCR_STORAGE_KEY", "parkingData")
    )

    def is_writable(self) -> tuple[bool, str]:
        """Check that the data directory can be created and written to."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(dir=self.data_dir):
                pass
        except OSError as e:
            return False, f"Storage directory {self.data_dir} is not writable: {e}"
        return True, f"Storing records in {self.data_dir}"


@dataclass
class ExportConfig:
    """Layout of the exported spreadsheet."""
    file_name: str = "parking_data.xlsx"
    sheet_title: str = "Parking Data"
    image_width: int = 150
    image_height: int = 100
    row_height: float = 80


@dataclass
class AppConfig:
    """Main application configuration."""
    tesseract: TesseractConfig = field(default_factory=TesseractConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Processing settings
    preprocessing_level: str = field(
        default_factory=lambda: os.getenv("PARKING_OCR_PREPROCESSING", "none")
    )
    max_file_size_mb: int = 10

    log_level: str = field(
        default_factory=lambda: os.getenv("PARKING_OCR_LOG_LEVEL", "INFO").upper()
    )

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


def validate_system_requirements() -> dict:
    """
    Validate all system requirements on startup.

    Returns:
        Dictionary with validation results for each requirement.
    """
    results = {}

    tesseract_valid, tesseract_msg, version = TesseractConfig.validate_installation()
    results["tesseract"] = {
        "installed": tesseract_valid,
        "message": tesseract_msg,
        "path": TesseractConfig.find_tesseract(),
        "version": version,
    }

    writable, storage_msg = get_config().storage.is_writable()
    results["storage"] = {
        "writable": writable,
        "message": storage_msg,
    }

    try:
        import cv2
        import openpyxl
        import PIL
        import pytesseract
        results["python_deps"] = {
            "installed": True,
            "message": "All Python dependencies installed"
        }
    except ImportError as e:
        results["python_deps"] = {
            "installed": False,
            "message": f"Missing Python dependency: {e.name}"
        }

    return results


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig()
        # Auto-detect Tesseract path
        tesseract_path = TesseractConfig.find_tesseract()
        if tesseract_path:
            _config.tesseract.tesseract_cmd = tesseract_path
    return _config


def reset_config() -> None:
    """Drop the global configuration so the next get_config() rebuilds it."""
    global _config
    _config = None
