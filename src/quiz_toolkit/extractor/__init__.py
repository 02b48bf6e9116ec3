"""
Module: extractor

Purpose:
    Extraction pipeline turning noisy exam document text into normalized
    multiple-choice questions. Page text comes from the native text layer
    or OCR; every parsing stage tries several conventions and keeps the
    best-performing one.

Key Functions:
    - process_question_answer_set(): Main entry point for PDF bytes
    - process_documents(): Entry point for page providers
    - parse_question_text(): Entry point for already-extracted text

Key Classes:
    - ExtractionConfig: Configuration for extraction settings

Dependencies:
    - fitz (PyMuPDF): PDF text extraction and rendering
    - PIL: Image preprocessing
    - pytesseract: OCR fallback

Used By:
    - quiz_toolkit.cli: Command-line extraction
"""

from .config import BatchConfig, ExtractionConfig, OcrConfig
from .errors import (
    CollaboratorFailure,
    CoordinatorTimeout,
    ExtractionFailure,
    QuizExtractionError,
    SegmentationFailure,
)
from .pipeline import parse_question_text, process_documents, process_question_answer_set

__all__ = [
    "BatchConfig",
    "CollaboratorFailure",
    "CoordinatorTimeout",
    "ExtractionConfig",
    "ExtractionFailure",
    "OcrConfig",
    "QuizExtractionError",
    "SegmentationFailure",
    "parse_question_text",
    "process_documents",
    "process_question_answer_set",
]
