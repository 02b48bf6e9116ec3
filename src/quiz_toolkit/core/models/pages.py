"""
Module: pages

Purpose:
    Provides the PageResult dataclass - the single outcome produced for
    every page of a document, whether its text came from the native text
    layer or from optical recognition of a rendered image.

Key Classes:
    - PageOrigin: Where the page text came from
    - PageResult: Immutable per-page text, confidence and origin

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - extractor.sources.page_text.PageTextSource
    - extractor.batch.coordinator.BatchCoordinator
    - extractor.pipeline
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PageOrigin(str, Enum):
    """Source of a page's text."""
    TEXT_LAYER = "text_layer"    # Machine-encoded text embedded in the page
    RECOGNITION = "recognition"  # Text recovered by OCR of a rendered image

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class PageResult:
    """
    Text obtained for one page (immutable).

    A page that yields nothing is still a valid result: empty text with
    zero confidence. The reason is kept in ``error`` so callers can report
    it without the batch ever aborting.

    Attributes:
        page_number: 1-based page number
        text: Cleaned page text (may be empty)
        confidence: 0.0-1.0; text-layer pages are always 1.0
        origin: TEXT_LAYER or RECOGNITION
        error: Why the page produced no text, if it failed

    Invariants:
        - page_number >= 1
        - 0.0 <= confidence <= 1.0

    Example:
        >>> PageResult(page_number=1, text="問1 ...", confidence=1.0,
        ...            origin=PageOrigin.TEXT_LAYER)
    """

    page_number: int
    text: str
    confidence: float
    origin: PageOrigin
    error: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate page result on construction."""
        if self.page_number < 1:
            raise ValueError(f"page_number must be >= 1: {self.page_number}")
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"confidence must be within [0, 1]: {self.confidence}")

    @classmethod
    def empty(
        cls,
        page_number: int,
        error: str,
        origin: PageOrigin = PageOrigin.RECOGNITION,
    ) -> PageResult:
        """
        Zero-confidence result for a page that produced no text.

        Args:
            page_number: 1-based page number
            error: Human-readable failure reason
            origin: Path that was attempted last

        Returns:
            PageResult with empty text and confidence 0.0
        """
        return cls(
            page_number=page_number,
            text="",
            confidence=0.0,
            origin=origin,
            error=error,
        )

    @property
    def has_text(self) -> bool:
        """True when the page produced any non-whitespace text."""
        return bool(self.text.strip())

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        d = {
            "page_number": self.page_number,
            "text": self.text,
            "confidence": self.confidence,
            "origin": self.origin.value,
        }
        if self.error:
            d["error"] = self.error
        return d
