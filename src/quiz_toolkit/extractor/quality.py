"""
Module: extractor.quality

Purpose:
    Advisory 0-100 quality score for an extraction, computed from
    structural signals in the source text: length, share of Japanese
    script, question keywords and choice-label patterns. The score never
    filters questions; it tells callers when human review is warranted.

Key Functions:
    - evaluate_quality(): Score plus issues and recommendations
    - report_for(): QualityReport for a ParseResult
    - score(): Integer score for a ParseResult
    - japanese_ratio(): Share of Japanese script in non-whitespace text

Key Classes:
    - QualityReport: Score with explanatory issues

Used By:
    - extractor.pipeline
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

from quiz_toolkit.common.thresholds import QUALITY_THRESHOLDS
from quiz_toolkit.core.models import ParseResult

# Hiragana, katakana (incl. half-width) and CJK ideographs
_JAPANESE_CHAR = re.compile(r"[\u3040-\u309f\u30a0-\u30ff\uff66-\uff9f\u4e00-\u9fff\u3400-\u4dbf]")
_WHITESPACE = re.compile(r"\s+")

QUESTION_KEYWORDS: Tuple[str, ...] = (
    "問題", "問", "次の", "以下の", "正しい", "適切", "選択",
    "Question", "following", "correct",
)

_CHOICE_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"[1-5][.．]"),
    re.compile(r"[ア-オ][.．]"),
    re.compile(r"[a-e][.．]"),
    re.compile(r"[(（][1-5][)）]"),
    re.compile(r"[①-⑤]"),
)


@dataclass(frozen=True)
class QualityReport:
    """Quality score with the reasons for each deduction."""
    score: int
    issues: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


def japanese_ratio(text: str) -> float:
    """Japanese script characters over non-whitespace characters."""
    compact = _WHITESPACE.sub("", text)
    if not compact:
        return 0.0
    return len(_JAPANESE_CHAR.findall(compact)) / len(compact)


def evaluate_quality(source_text: str) -> QualityReport:
    """
    Score source text from 100 down, one fixed penalty per failed check.

    Args:
        source_text: Text the questions were extracted from

    Returns:
        QualityReport with a score in [0, 100]

    Example:
        >>> evaluate_quality("").score
        0
    """
    t = QUALITY_THRESHOLDS
    text = source_text or ""
    points = 100
    issues = []
    recommendations = []

    if len(text) < t.min_source_length:
        points -= t.short_text_penalty
        issues.append(f"Text is short ({len(text)} characters)")
        recommendations.append("Re-run recognition at a higher render scale")

    ratio = japanese_ratio(text)
    if ratio < t.min_japanese_ratio:
        points -= t.low_japanese_penalty
        issues.append(f"Low Japanese character ratio ({ratio:.0%})")
        recommendations.append("Check the recognition language profile")

    if not any(keyword in text for keyword in QUESTION_KEYWORDS):
        points -= t.missing_keyword_penalty
        issues.append("No question keywords found")
        recommendations.append("Confirm the document contains question text")

    if not any(p.search(text) for p in _CHOICE_PATTERNS):
        points -= t.missing_choice_penalty
        issues.append("No choice label pattern found")
        recommendations.append("Confirm the choices were captured")

    return QualityReport(
        score=max(0, min(100, points)),
        issues=tuple(issues),
        recommendations=tuple(recommendations),
    )


def report_for(result: ParseResult, source_text: str = "") -> QualityReport:
    """
    Quality report for a parse result.

    When no source text is given the result's own question text and
    choices are scored instead.
    """
    if not source_text:
        source_text = "\n".join(
            "\n".join([q.question_text, *q.choices[: q.choice_count]])
            for q in result.questions
        )
    return evaluate_quality(source_text)


def score(result: ParseResult, source_text: str = "") -> int:
    """Integer quality score for a parse result, see report_for()."""
    return report_for(result, source_text).score
