"""
Module: results

Purpose:
    Provides the aggregate outputs of extraction: the parsed answer key,
    the reconciled parse result, the batch result for a document and the
    document-level result handed to persistence.

Key Classes:
    - AnswerKey: Question number -> correct choice index map
    - ParseResult: Reconciled questions plus issues and quality score
    - BatchResult: Ordered page results for one batch job
    - DocumentResult: Parse result with its page results and category info

Dependencies:
    - dataclasses (std)
    - core.models.pages, core.models.questions, core.models.progress

Used By:
    - extractor.answers.answer_key
    - extractor.reconcile
    - extractor.batch.coordinator
    - extractor.pipeline
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .pages import PageResult
from .progress import JobStatus
from .questions import AnswerKeyEntry, ExtractedQuestion


@dataclass(frozen=True)
class AnswerKey:
    """
    Answers parsed from an answer document.

    Attributes:
        answers: Question number -> 0-based correct choice index
        layout: Name of the layout that won, None if nothing matched
        duplicates: Question numbers that appeared more than once
    """

    answers: Dict[int, int] = field(default_factory=dict)
    layout: Optional[str] = None
    duplicates: Tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.answers)

    def __contains__(self, question_number: object) -> bool:
        return question_number in self.answers

    def get(self, question_number: int) -> Optional[int]:
        return self.answers.get(question_number)

    def entries(self) -> List[AnswerKeyEntry]:
        """Entries ordered by question number."""
        return [
            AnswerKeyEntry(number, index)
            for number, index in sorted(self.answers.items())
        ]


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one question document (optionally with answers).

    Attributes:
        questions: Extracted questions in document order
        total_answers: Entries found in the answer key
        quality_score: 0-100 advisory score (0 until scored)
        issues: Human-readable warnings; never raised
        answered_count: Questions that received a correct index
        unmatched_answer_count: Answer entries with no matching question
    """

    questions: Tuple[ExtractedQuestion, ...] = ()
    total_answers: int = 0
    quality_score: int = 0
    issues: Tuple[str, ...] = ()
    answered_count: int = 0
    unmatched_answer_count: int = 0

    def __post_init__(self) -> None:
        if not (0 <= self.quality_score <= 100):
            raise ValueError(f"quality_score must be 0-100: {self.quality_score}")

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        return {
            "questions": [q.to_dict() for q in self.questions],
            "total_questions": len(self.questions),
            "total_answers": self.total_answers,
            "answered_count": self.answered_count,
            "unmatched_answer_count": self.unmatched_answer_count,
            "quality_score": self.quality_score,
            "issues": list(self.issues),
        }


@dataclass(frozen=True)
class BatchResult:
    """Page results of one batch job, in strict page order."""

    job_id: str
    pages: Tuple[PageResult, ...] = ()
    status: JobStatus = JobStatus.COMPLETED
    issues: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def text(self) -> str:
        """Page texts joined in page order, skipping empty pages."""
        return "\n\n".join(p.text for p in self.pages if p.has_text)

    @property
    def pages_with_text(self) -> int:
        return sum(1 for p in self.pages if p.has_text)

    @property
    def average_confidence(self) -> float:
        if not self.pages:
            return 0.0
        return sum(p.confidence for p in self.pages) / len(self.pages)


@dataclass(frozen=True)
class DocumentResult:
    """
    Output boundary for a processed question/answer document pair.

    Attributes:
        parse_result: Reconciled and scored questions
        question_pages: Batch result for the question document
        answer_pages: Batch result for the answer document, if supplied
        category_id: Caller-supplied category, passed through unchanged
        category_hint: Text an external classifier can categorize from
    """

    parse_result: ParseResult
    question_pages: BatchResult
    answer_pages: Optional[BatchResult] = None
    category_id: Optional[str] = None
    category_hint: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        d = self.parse_result.to_dict()
        d["question_pages"] = len(self.question_pages.pages)
        if self.answer_pages is not None:
            d["answer_pages"] = len(self.answer_pages.pages)
        d["category_id"] = self.category_id
        d["category_hint"] = self.category_hint
        return d
