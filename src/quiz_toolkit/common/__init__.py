"""Common utilities shared across the toolkit."""

from __future__ import annotations

from .thresholds import (
    BATCH_THRESHOLDS,
    CHOICE_THRESHOLDS,
    DIAGNOSTIC_THRESHOLDS,
    PAGE_TEXT_THRESHOLDS,
    QUALITY_THRESHOLDS,
    SEGMENTATION_THRESHOLDS,
)

__all__ = [
    "BATCH_THRESHOLDS",
    "CHOICE_THRESHOLDS",
    "DIAGNOSTIC_THRESHOLDS",
    "PAGE_TEXT_THRESHOLDS",
    "QUALITY_THRESHOLDS",
    "SEGMENTATION_THRESHOLDS",
]
