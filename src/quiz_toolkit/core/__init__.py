"""
Quiz Toolkit Core Package

Shared immutable data models for the extraction pipeline. Models are
frozen dataclasses; any change produces a new instance via
``dataclasses.replace``.
"""

from .models import (
    AnswerKey,
    AnswerKeyEntry,
    BatchResult,
    DocumentResult,
    ExtractedQuestion,
    JobStatus,
    PageOrigin,
    PageResult,
    ParseResult,
    ProgressSnapshot,
    RawBlock,
)

__all__ = [
    "AnswerKey",
    "AnswerKeyEntry",
    "BatchResult",
    "DocumentResult",
    "ExtractedQuestion",
    "JobStatus",
    "PageOrigin",
    "PageResult",
    "ParseResult",
    "ProgressSnapshot",
    "RawBlock",
]
