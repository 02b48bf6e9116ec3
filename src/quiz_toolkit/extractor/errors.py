"""
Module: extractor.errors

Purpose:
    Error taxonomy for extraction. Page-level and chunk-level failures are
    absorbed by the pipeline and recorded as data on PageResult; only
    SegmentationFailure reaches callers.

Key Classes:
    - QuizExtractionError: Base class for all extraction errors
    - ExtractionFailure: A page yielded no text from any path
    - CollaboratorFailure: Renderer or recognizer raised
    - CoordinatorTimeout: A chunk exceeded its time budget
    - SegmentationFailure: No questions could be found in a document

Used By:
    - extractor.sources: Adapters wrap library errors in CollaboratorFailure
    - extractor.batch.coordinator: Records per-page failures
    - extractor.pipeline: Raises SegmentationFailure
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class QuizExtractionError(Exception):
    """Base class for extraction errors."""
    pass


class ExtractionFailure(QuizExtractionError):
    """Page yielded no text from either the text layer or recognition."""
    pass


class CollaboratorFailure(QuizExtractionError):
    """Renderer, recognizer or text-layer reader raised."""
    pass


class CoordinatorTimeout(QuizExtractionError):
    """Chunk did not finish within its wall-clock budget."""
    pass


class SegmentationFailure(QuizExtractionError):
    """
    No questions could be found in the document.

    Carries diagnostics so the caller can tell an empty scan from text
    in an unsupported layout.

    Attributes:
        text_length: Length of the cleaned document text
        sample: Leading characters of the text
        analysis: Content flags (digits, scripts, choice markers, lines)
        recommendation: Suggested next step for the user
    """

    def __init__(
        self,
        message: str,
        *,
        text_length: int = 0,
        sample: str = "",
        analysis: Optional[Dict[str, Any]] = None,
        recommendation: str = "",
    ) -> None:
        super().__init__(message)
        self.text_length = text_length
        self.sample = sample
        self.analysis = dict(analysis or {})
        self.recommendation = recommendation

    def to_dict(self) -> Dict[str, Any]:
        """Serialize diagnostics for JSON output."""
        return {
            "error": str(self),
            "text_length": self.text_length,
            "sample": self.sample,
            "analysis": self.analysis,
            "recommendation": self.recommendation,
        }
