"""
Module: extractor.reconcile

Purpose:
    Joins extracted questions with a parsed answer key by question number.
    Partial matches are normal: unmatched questions keep no answer and
    unmatched answer entries are counted, both reported as issue strings.

Key Functions:
    - reconcile(): Apply an AnswerKey to questions, producing a ParseResult

Used By:
    - extractor.pipeline
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from quiz_toolkit.core.models import AnswerKey, ExtractedQuestion, ParseResult

logger = logging.getLogger(__name__)


def reconcile(
    questions: Sequence[ExtractedQuestion],
    answer_key: AnswerKey,
) -> ParseResult:
    """
    Set each question's correct choice from the answer key.

    Questions whose number is in the key get exactly that index; all
    others get None, even if an index was set earlier. Nothing is guessed.
    The quality score is left at 0 for the scorer to fill in.

    Args:
        questions: Extracted questions in document order
        answer_key: Parsed answers keyed by question number

    Returns:
        ParseResult with reconciled questions and issue strings
    """
    reconciled = [
        replace(q, correct_choice_index=answer_key.get(q.question_number))
        for q in questions
    ]

    question_numbers = {q.question_number for q in reconciled}
    answered = sum(1 for q in reconciled if q.correct_choice_index is not None)
    unmatched = sorted(n for n in answer_key.answers if n not in question_numbers)

    issues: List[str] = []
    if len(answer_key):
        issues.append(f"{answered} of {len(reconciled)} questions matched an answer")
        if unmatched:
            issues.append(
                f"{len(unmatched)} answer-key entries have no matching question: "
                f"{', '.join(str(n) for n in unmatched)}"
            )
        if len(answer_key) != len(reconciled):
            issues.append(
                f"Answer count ({len(answer_key)}) differs from "
                f"question count ({len(reconciled)})"
            )
        if answer_key.duplicates:
            issues.append(
                "Answer key repeats question numbers "
                f"{', '.join(str(n) for n in answer_key.duplicates)}; "
                "last occurrence was used"
            )

    if unmatched or answered < len(reconciled):
        logger.info(
            f"Reconciled {answered}/{len(reconciled)} questions, "
            f"{len(unmatched)} unmatched answers"
        )

    return ParseResult(
        questions=tuple(reconciled),
        total_answers=len(answer_key),
        issues=tuple(issues),
        answered_count=answered,
        unmatched_answer_count=len(unmatched),
    )
