"""Contract processing record and status lifecycle."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from .engine import ContractRiskEngine
from .models import AnalysisResult
from .parsers import DocumentError, extract_text

logger = logging.getLogger(__name__)

ERROR_MESSAGE_MAX_CHARS = 500


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[ProcessingStatus, set[ProcessingStatus]] = {
    ProcessingStatus.PENDING: {ProcessingStatus.PROCESSING, ProcessingStatus.FAILED},
    ProcessingStatus.PROCESSING: {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED},
    ProcessingStatus.COMPLETED: set(),
    ProcessingStatus.FAILED: set(),
}


class InvalidTransition(ValueError):
    """A processing status change that the lifecycle does not allow."""


@dataclass
class ContractRecord:
    """One uploaded contract moving through processing."""

    file_name: str
    file_size: int = 0
    status: ProcessingStatus = ProcessingStatus.PENDING
    extracted_text: str = ""
    page_count: Optional[int] = None
    word_count: Optional[int] = None
    analysis: Optional[AnalysisResult] = None
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    processing_time: Optional[float] = None
    _clock_start: Optional[float] = field(default=None, repr=False)

    def _transition(self, status: ProcessingStatus) -> None:
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransition(f"Cannot move from {self.status.value} to {status.value}")
        self.status = status

    def start(self) -> None:
        self._transition(ProcessingStatus.PROCESSING)
        self.started_at = datetime.now(timezone.utc)
        self._clock_start = time.monotonic()

    def complete(self, analysis: AnalysisResult) -> None:
        self._transition(ProcessingStatus.COMPLETED)
        self.analysis = analysis
        self._finish()

    def fail(self, message: str) -> None:
        self._transition(ProcessingStatus.FAILED)
        self.error_message = message[:ERROR_MESSAGE_MAX_CHARS]
        self._finish()

    def _finish(self) -> None:
        self.finished_at = datetime.now(timezone.utc)
        if self._clock_start is not None:
            self.processing_time = time.monotonic() - self._clock_start

    @property
    def processing_duration(self) -> Optional[str]:
        """Human-readable processing time, e.g. ``"42s"`` or ``"1m 5s"``."""
        if self.processing_time is None:
            return None
        seconds = int(self.processing_time)
        if seconds < 60:
            return f"{seconds}s"
        return f"{seconds // 60}m {seconds % 60}s"

    def to_dict(self) -> dict:
        return {
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "processingStatus": self.status.value,
            "pageCount": self.page_count,
            "wordCount": self.word_count,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "errorMessage": self.error_message,
            "processingTime": self.processing_time,
            "processingDuration": self.processing_duration,
        }


def process_contract(
    path: str | Path,
    engine: ContractRiskEngine,
    max_bytes: int = 10 * 1024 * 1024,
) -> ContractRecord:
    """Extract and analyze one contract file, recording the outcome.

    Extraction problems mark the record failed instead of raising.
    """
    path = Path(path)
    record = ContractRecord(
        file_name=path.name,
        file_size=path.stat().st_size if path.is_file() else 0,
    )
    record.start()

    try:
        document = extract_text(path, max_bytes=max_bytes)
    except DocumentError as exc:
        logger.error("Contract processing failed for %s: %s", path.name, exc)
        record.fail(str(exc))
        return record

    record.extracted_text = document.text
    record.page_count = document.page_count
    record.word_count = document.word_count
    record.complete(engine.analyze(document.text, path.name))
    return record
