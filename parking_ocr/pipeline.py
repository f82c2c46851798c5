"""
Batch processing of uploaded receipts.

Each file is read, recognized and parsed in upload order, one at a time.
A failing file never stops the batch: files that cannot be read or decoded
as images are skipped, and files the OCR engine fails on are kept with both
fields "Not found".
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from parking_ocr.errors import ReadError, RecognitionError
from parking_ocr.images.loader import load_image
from parking_ocr.models.record import ParsedRecord
from parking_ocr.ocr.extractor import TextExtractor
from parking_ocr.parsing.dates import sort_records
from parking_ocr.parsing.fields import parse
from parking_ocr.storage.store import RecordStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class FileFailure:
    """A file that could not be fully processed."""
    name: str
    stage: str  # "read" or "recognize"
    message: str


@dataclass
class BatchResult:
    """Outcome of one upload batch."""
    records: list[ParsedRecord] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures


class BatchProcessor:
    """Runs uploaded files through OCR and field parsing into the store."""

    def __init__(
        self,
        extractor: TextExtractor,
        store: RecordStore,
        language: str = "eng",
        max_file_bytes: Optional[int] = None,
    ):
        self.extractor = extractor
        self.store = store
        self.language = language
        self.max_file_bytes = max_file_bytes

    def process(
        self,
        files: Sequence[Any],
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchResult:
        """
        Process one upload batch and replace the stored records with it.

        Args:
            files: Uploaded files (bytes, paths or file objects)
            on_progress: Called as ``(done, total, name)`` after each file

        Returns:
            BatchResult with the sorted records and any per-file failures
        """
        result = BatchResult()
        total = len(files)
        if total == 0:
            return result

        logger.info(f"Processing batch of {total} files")
        entries = []
        for index, file in enumerate(files):
            name = getattr(file, "name", None) or f"file {index + 1}"
            record = self._process_file(file, name, result)
            if record is not None:
                entries.append(record)
            if on_progress:
                on_progress(index + 1, total, name)

        result.records = sort_records(entries)

        # A batch where nothing could be read leaves existing records alone
        if result.records:
            self.store.replace(result.records)

        logger.info(
            f"Batch finished: {len(result.records)} records, {len(result.failures)} failures"
        )
        return result

    def _process_file(
        self,
        file: Any,
        name: str,
        result: BatchResult,
    ) -> Optional[ParsedRecord]:
        try:
            image = load_image(file, max_bytes=self.max_file_bytes)
        except ReadError as e:
            logger.warning(f"Skipping {name}: {e}")
            result.failures.append(FileFailure(name, "read", str(e)))
            return None

        try:
            raw_text = self.extractor.recognize(image, self.language)
        except RecognitionError as e:
            logger.warning(f"OCR failed for {name}: {e}")
            result.failures.append(FileFailure(name, "recognize", str(e)))
            return ParsedRecord(image=image)
        except Exception as e:
            logger.exception(f"Text extractor raised unexpectedly for {name}")
            result.failures.append(FileFailure(name, "recognize", str(e)))
            return ParsedRecord(image=image)

        fields = parse(raw_text)
        logger.debug(f"{name}: date={fields.date!r} cost={fields.cost!r}")
        return ParsedRecord(image=image, date=fields.date, cost=fields.cost)
