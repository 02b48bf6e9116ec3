"""
Module: extractor.sources.pdf

Purpose:
    PyMuPDF-backed PageProvider: reads a page's native text layer and
    renders pages to PNG for recognition. PyMuPDF documents are not
    thread-safe, so every access goes through one lock per document.

Key Classes:
    - PdfPageProvider: PageProvider over a fitz.Document

Dependencies:
    - fitz (PyMuPDF): PDF parsing, text extraction and rendering

Used By:
    - extractor.pipeline: Opens uploaded question/answer PDFs
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Union

import fitz

from ..errors import CollaboratorFailure

logger = logging.getLogger(__name__)


class PdfPageProvider:
    """
    Page access for one PDF document (1-based page numbers).

    Example:
        >>> with PdfPageProvider.from_bytes(pdf_bytes) as pages:
        ...     text = pages.extract_native_text(1)
        ...     png = pages.render_page_to_image(1, scale=2.0)
    """

    def __init__(self, doc: fitz.Document) -> None:
        self._doc = doc
        self._lock = threading.Lock()

    @classmethod
    def from_bytes(cls, data: bytes) -> PdfPageProvider:
        """
        Open a PDF from raw bytes.

        Raises:
            CollaboratorFailure: If the bytes are not a readable PDF
        """
        try:
            return cls(fitz.open(stream=data, filetype="pdf"))
        except (RuntimeError, ValueError) as e:
            raise CollaboratorFailure(f"Cannot open PDF: {e}") from e

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> PdfPageProvider:
        """
        Open a PDF file.

        Raises:
            CollaboratorFailure: If the file is missing or not a readable PDF
        """
        try:
            return cls(fitz.open(str(path)))
        except (RuntimeError, ValueError, OSError) as e:
            raise CollaboratorFailure(f"Cannot open PDF {path}: {e}") from e

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def _page(self, page_number: int) -> fitz.Page:
        if not (1 <= page_number <= self._doc.page_count):
            raise CollaboratorFailure(
                f"Page {page_number} out of range (1-{self._doc.page_count})"
            )
        return self._doc[page_number - 1]

    def extract_native_text(self, page_number: int) -> str:
        """Native text layer of a page, empty if it has none."""
        with self._lock:
            try:
                return self._page(page_number).get_text("text") or ""
            except (RuntimeError, ValueError) as e:
                raise CollaboratorFailure(
                    f"Text extraction failed on page {page_number}: {e}"
                ) from e

    def render_page_to_image(self, page_number: int, scale: float) -> bytes:
        """
        Render a page to PNG bytes.

        Args:
            page_number: 1-based page number
            scale: Zoom factor relative to 72 DPI

        Raises:
            CollaboratorFailure: If rendering fails
        """
        with self._lock:
            try:
                page = self._page(page_number)
                pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
                return pix.tobytes("png")
            except (RuntimeError, ValueError) as e:
                raise CollaboratorFailure(
                    f"Rendering failed on page {page_number}: {e}"
                ) from e

    def close(self) -> None:
        with self._lock:
            if not self._doc.is_closed:
                self._doc.close()

    def __enter__(self) -> PdfPageProvider:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
