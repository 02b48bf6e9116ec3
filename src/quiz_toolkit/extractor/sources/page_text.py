"""
Module: extractor.sources.page_text

Purpose:
    Page text acquisition with a single fallback chain: native text layer,
    then optional image preprocessing and optical recognition of a rendered
    page. Every page yields exactly one PageResult; failures become empty
    zero-confidence results instead of exceptions.

Key Classes:
    - PageProvider: Protocol for document access (text layer + rendering)
    - Recognizer: Protocol for an OCR engine instance
    - PageTextSource: Runs the fallback chain for one page at a time

Dependencies:
    - extractor.sources.ocr: Default image preprocessing

Used By:
    - extractor.batch.coordinator: Fetches pages in chunks
    - extractor.pipeline: Builds a source per document
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Tuple

from quiz_toolkit.core.models import PageOrigin, PageResult

from ..config import OcrConfig
from ..errors import CollaboratorFailure, ExtractionFailure
from ..labels import clean_text
from .ocr import preprocess_for_ocr

logger = logging.getLogger(__name__)


class PageProvider(Protocol):
    """Document access needed by PageTextSource. Pages are 1-based."""

    @property
    def page_count(self) -> int: ...

    def extract_native_text(self, page_number: int) -> str: ...

    def render_page_to_image(self, page_number: int, scale: float) -> bytes: ...


class Recognizer(Protocol):
    """One OCR engine instance; released with close() after each page."""

    def recognize_text(self, image: bytes, language_profile: str) -> Tuple[str, float]: ...

    def close(self) -> None: ...


RecognizerFactory = Callable[[], Recognizer]
ImagePreprocessor = Callable[[bytes, int], bytes]


class PageTextSource:
    """
    Obtain text for individual pages of one document.

    The text layer is used when it yields at least ``min_text_length``
    characters; otherwise the page is rendered and recognized. A fresh
    recognizer is created for every recognized page and closed afterwards
    to bound memory on long documents.

    Example:
        >>> source = PageTextSource(PdfPageProvider.from_path(path), TesseractRecognizer)
        >>> result = source.get_page_text(1)
        >>> result.origin
        <PageOrigin.TEXT_LAYER: 'text_layer'>
    """

    def __init__(
        self,
        pages: PageProvider,
        recognizer_factory: Optional[RecognizerFactory] = None,
        config: Optional[OcrConfig] = None,
        preprocessor: ImagePreprocessor = preprocess_for_ocr,
    ) -> None:
        self.pages = pages
        self.recognizer_factory = recognizer_factory
        self.config = config or OcrConfig()
        self.preprocessor = preprocessor

    @property
    def page_count(self) -> int:
        return self.pages.page_count

    def get_page_text(self, page_number: int) -> PageResult:
        """
        Text for one page via the fallback chain.

        Args:
            page_number: 1-based page number

        Returns:
            PageResult; empty with confidence 0.0 if both paths fail
        """
        native = self._native_text(page_number)
        if len(native) >= self.config.min_text_length:
            return PageResult(
                page_number=page_number,
                text=native,
                confidence=1.0,
                origin=PageOrigin.TEXT_LAYER,
            )

        if self.recognizer_factory is None:
            failure = ExtractionFailure(
                f"Page {page_number}: text layer yielded {len(native)} characters "
                "and no recognizer is configured"
            )
            logger.warning(str(failure))
            return PageResult.empty(page_number, str(failure), origin=PageOrigin.TEXT_LAYER)

        try:
            text, confidence = self._recognize(page_number)
        except CollaboratorFailure as e:
            logger.warning(f"Page {page_number}: recognition failed: {e}")
            return PageResult.empty(page_number, str(e))
        except Exception as e:
            failure = CollaboratorFailure(f"{type(e).__name__}: {e}")
            logger.warning(f"Page {page_number}: recognition failed: {failure}")
            return PageResult.empty(page_number, str(failure))

        if not text:
            failure = ExtractionFailure(f"Page {page_number}: no text from any source")
            logger.warning(str(failure))
            return PageResult.empty(page_number, str(failure))

        return PageResult(
            page_number=page_number,
            text=text,
            confidence=confidence,
            origin=PageOrigin.RECOGNITION,
        )

    def _native_text(self, page_number: int) -> str:
        try:
            return clean_text(self.pages.extract_native_text(page_number))
        except CollaboratorFailure as e:
            logger.warning(f"Page {page_number}: text layer unavailable: {e}")
            return ""
        except Exception as e:
            logger.warning(
                f"Page {page_number}: text layer unavailable: {type(e).__name__}: {e}"
            )
            return ""

    def _recognize(self, page_number: int) -> Tuple[str, float]:
        image = self.pages.render_page_to_image(page_number, self.config.render_scale)
        if self.config.preprocess:
            image = self.preprocessor(image, self.config.binarize_threshold)

        recognizer = self.recognizer_factory()
        try:
            text, confidence = recognizer.recognize_text(image, self.config.language_profile)
        finally:
            recognizer.close()

        text = clean_text(text)
        confidence = max(0.0, min(1.0, float(confidence))) if text else 0.0
        logger.debug(
            f"Page {page_number}: recognized {len(text)} characters "
            f"(confidence {confidence:.2f})"
        )
        return text, confidence
