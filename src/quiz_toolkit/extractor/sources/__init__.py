"""
Module: extractor.sources

Purpose:
    Page text sources: the text-layer/recognition fallback chain and its
    PyMuPDF and Tesseract adapters.
"""

from .ocr import TesseractRecognizer, preprocess_for_ocr
from .page_text import PageProvider, PageTextSource, Recognizer
from .pdf import PdfPageProvider

__all__ = [
    "PageProvider",
    "PageTextSource",
    "PdfPageProvider",
    "Recognizer",
    "TesseractRecognizer",
    "preprocess_for_ocr",
]
