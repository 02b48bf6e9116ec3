"""
Module: questions

Purpose:
    Provides the question-level data structures passed between the
    segmenter, the choice extractor and the reconciler: raw question
    blocks, extracted questions with a fixed five-slot choice tuple, and
    answer-key entries.

Key Classes:
    - RawBlock: One question's slice of the document text
    - ExtractedQuestion: Normalized question with exactly five choices
    - AnswerKeyEntry: (question number, correct choice index) pair

Dependencies:
    - dataclasses (std)
    - common.thresholds: Choice slot count

Used By:
    - extractor.detection.segmenter
    - extractor.detection.choices
    - extractor.answers.answer_key
    - extractor.reconcile
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from quiz_toolkit.common.thresholds import CHOICE_THRESHOLDS

CHOICE_SLOTS = CHOICE_THRESHOLDS.choice_slots


@dataclass(frozen=True, slots=True)
class RawBlock:
    """
    A contiguous block of document text believed to hold one question.

    Attributes:
        text: Block text, including its leading question marker
        start_offset: Character offset of the block in the cleaned text
        number: Question number read from the marker, None for paragraphs
        pattern: Name of the numbering strategy that produced the block
    """

    text: str
    start_offset: int
    number: Optional[int] = None
    pattern: str = "paragraph"

    def __post_init__(self) -> None:
        if self.start_offset < 0:
            raise ValueError(f"start_offset cannot be negative: {self.start_offset}")
        if self.number is not None and self.number < 1:
            raise ValueError(f"number must be >= 1: {self.number}")


@dataclass(frozen=True, slots=True)
class ExtractedQuestion:
    """
    One extracted multiple-choice question (immutable).

    Downstream consumers always receive exactly five choices regardless of
    how many the source printed; missing slots hold a placeholder marker.

    Attributes:
        question_number: 1-based number (inferred from position if absent)
        question_text: Question body with choices and boilerplate removed
        choices: Exactly five choice strings
        correct_choice_index: 0-based index of the correct choice, if known
        choice_count: How many of the five choices came from the source

    Invariants:
        - question_number >= 1
        - question_text is non-empty after trimming
        - len(choices) == 5
        - correct_choice_index is None or in [0, 4]

    Example:
        >>> q = ExtractedQuestion(1, "What is X?", ("A", "B", "C", "D", "E"))
        >>> q.correct_choice_index is None
        True
    """

    question_number: int
    question_text: str
    choices: Tuple[str, ...]
    correct_choice_index: Optional[int] = None
    choice_count: int = CHOICE_SLOTS

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if self.question_number < 1:
            raise ValueError(f"question_number must be >= 1: {self.question_number}")
        if not self.question_text.strip():
            raise ValueError("question_text cannot be empty")
        if len(self.choices) != CHOICE_SLOTS:
            raise ValueError(
                f"choices must have exactly {CHOICE_SLOTS} entries: {len(self.choices)}"
            )
        if self.correct_choice_index is not None and not (
            0 <= self.correct_choice_index < CHOICE_SLOTS
        ):
            raise ValueError(
                f"correct_choice_index must be 0-4: {self.correct_choice_index}"
            )
        if not (0 <= self.choice_count <= CHOICE_SLOTS):
            raise ValueError(f"choice_count must be 0-5: {self.choice_count}")

    @property
    def has_answer(self) -> bool:
        """True when a correct choice has been resolved."""
        return self.correct_choice_index is not None

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        return {
            "question_number": self.question_number,
            "question_text": self.question_text,
            "choices": list(self.choices),
            "correct_choice_index": self.correct_choice_index,
            "choice_count": self.choice_count,
        }


@dataclass(frozen=True, slots=True)
class AnswerKeyEntry:
    """Correct choice for one question number."""

    question_number: int
    correct_choice_index: int

    def __post_init__(self) -> None:
        if self.question_number < 1:
            raise ValueError(f"question_number must be >= 1: {self.question_number}")
        if not (0 <= self.correct_choice_index < CHOICE_SLOTS):
            raise ValueError(
                f"correct_choice_index must be 0-4: {self.correct_choice_index}"
            )
