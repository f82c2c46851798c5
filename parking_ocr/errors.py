"""Exception types raised across the parking receipt pipeline."""


class ParkingOCRError(Exception):
    """Base exception for parking receipt processing errors."""
    pass


class ReadError(ParkingOCRError):
    """An uploaded file could not be read."""
    pass


class RecognitionError(ParkingOCRError):
    """The text extractor failed on an image."""
    pass


class DeserializationError(ParkingOCRError):
    """Persisted records could not be decoded."""
    pass


class ExportError(ParkingOCRError):
    """The spreadsheet could not be built or written."""
    pass
