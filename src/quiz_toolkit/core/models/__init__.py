"""Immutable data models shared across the extractor."""

from .pages import PageOrigin, PageResult
from .progress import JobStatus, ProgressSnapshot
from .questions import CHOICE_SLOTS, AnswerKeyEntry, ExtractedQuestion, RawBlock
from .results import AnswerKey, BatchResult, DocumentResult, ParseResult

__all__ = [
    "CHOICE_SLOTS",
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
