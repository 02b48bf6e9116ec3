"""Centralized threshold and magic number configuration.

This module contains the hardcoded thresholds, ratios, and penalties used
throughout extraction. Having these in one place makes tuning easier and
documents where each value comes from.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PageTextThresholds:
    """Thresholds for page text acquisition."""

    min_text_length: int = 10  # Trimmed text-layer chars below this count as "no yield"
    default_render_scale: float = 2.0  # Upscale factor for recognition renders
    binarize_threshold: int = 160  # Grey level split used by OCR preprocessing
    confidence_scale: float = 100.0  # Engines reporting 0-100 are divided by this


@dataclass
class SegmentationThresholds:
    """Thresholds for question segmentation."""

    min_paragraph_length: int = 50  # Paragraph fallback drops shorter blocks (headers/footers)
    min_numbered_body_length: int = 20  # "12. text" lines shorter than this are choice lines
    max_question_number: int = 200  # Numbers above this are page numbers, years, etc.


@dataclass
class ChoiceThresholds:
    """Thresholds for choice extraction."""

    choice_slots: int = 5  # Every extracted question carries exactly this many choices
    min_choices: int = 2  # A single labelled option is never a multiple-choice question


@dataclass
class QualityThresholds:
    """Penalties applied by the quality scorer."""

    min_source_length: int = 100
    short_text_penalty: int = 30
    min_japanese_ratio: float = 0.3
    low_japanese_penalty: int = 20
    missing_keyword_penalty: int = 25
    missing_choice_penalty: int = 25


@dataclass
class BatchThresholds:
    """Defaults for the batch coordinator and job registry."""

    chunk_size: int = 5
    chunk_timeout_seconds: float = 120.0
    max_pages: int = 100
    retention_seconds: float = 60 * 60  # Finished jobs stay pollable for one hour


@dataclass
class DiagnosticThresholds:
    """Limits for diagnostic text attached to failures."""

    sample_chars: int = 500  # Text sample carried by SegmentationFailure
    preview_chars: int = 50  # Question preview length in log lines


# Global instances for easy import
PAGE_TEXT_THRESHOLDS = PageTextThresholds()
SEGMENTATION_THRESHOLDS = SegmentationThresholds()
CHOICE_THRESHOLDS = ChoiceThresholds()
QUALITY_THRESHOLDS = QualityThresholds()
BATCH_THRESHOLDS = BatchThresholds()
DIAGNOSTIC_THRESHOLDS = DiagnosticThresholds()
