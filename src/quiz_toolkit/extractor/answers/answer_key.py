"""
Module: extractor.answers.answer_key

Purpose:
    Answer-key parsing - reads a separately formatted answer document into
    a question number -> correct choice index map. Answer documents come in
    several layouts, so every layout is evaluated and the one yielding the
    most distinct question numbers wins.

Key Functions:
    - parse_answer_key(): Parse answer document text into an AnswerKey
    - find_pairs(): Well-formed (number, label) pairs for one layout

Dependencies:
    - re (std)
    - extractor.strategies: Best-candidate selection
    - extractor.labels: Label normalization

Used By:
    - extractor.pipeline: Parses answer documents
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Callable, Dict, List, Optional, Tuple

from quiz_toolkit.core.models import AnswerKey

from ..config import ExtractionConfig
from ..labels import clean_text, is_choice_label, normalize_choice_label
from ..strategies import select_best

logger = logging.getLogger(__name__)

# (question number, raw label)
RawPair = Tuple[int, str]

_LABEL = r"[(（]?([1-5１-５a-eA-Eア-オあいうえお①-⑤])[)）]?"

# 問1: 2 / Question 3 → c / Q4 正解：ウ / 問5 答え 1
_INLINE = re.compile(
    r"(?<![A-Za-z\d])(?:問題?|Question|Q)[ \t]*(\d{1,3})(?!\d)[ \t]*[.．)）]?[ \t]*"
    r"(?:(?:答え|解答|正解|[Aa]nswer)[ \t.．]*[:：=＝→｜|]?|[:：=＝→｜|])[ \t]*"
    + _LABEL
    + r"(?!\w)"
)

# One "N. label" / "N: label" / "N | label" / "N → label" / "N label" pair per line
_TABULAR = re.compile(
    r"^[ \t]*(\d{1,3})(?:[ \t]*[.．:：)）|｜→][ \t]*|[ \t]+)" + _LABEL + r"[ \t]*$",
    re.MULTILINE,
)

_PROXIMITY_NUMBER = re.compile(r"^(\d{1,3})[.．]?$")
_PROXIMITY_LABEL = re.compile(r"^" + _LABEL + r"[.．]?$")

# Several "N label" pairs on one line: 1 a 2 c 3 b
_ROW = re.compile(
    r"(?:^|(?<=[ \t]))(\d{1,3})(?:[.．:：)）][ \t]*|[ \t]+)" + _LABEL + r"(?=[ \t]|$)",
    re.MULTILINE,
)


def _regex_pairs(pattern: re.Pattern) -> Callable[[str], List[RawPair]]:
    def run(text: str) -> List[RawPair]:
        return [(int(m.group(1)), m.group(2)) for m in pattern.finditer(text)]
    return run


def _proximity_pairs(text: str) -> List[RawPair]:
    """Number alone on one line, label alone on the next."""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    pairs: List[RawPair] = []
    i = 0
    while i < len(lines) - 1:
        number = _PROXIMITY_NUMBER.match(lines[i])
        label = _PROXIMITY_LABEL.match(lines[i + 1])
        if number and label:
            pairs.append((int(number.group(1)), label.group(1)))
            i += 2
        else:
            i += 1
    return pairs


LAYOUTS: Tuple[Tuple[str, Callable[[str], List[RawPair]]], ...] = (
    ("inline", _regex_pairs(_INLINE)),
    ("tabular", _regex_pairs(_TABULAR)),
    ("proximity", _proximity_pairs),
    ("row", _regex_pairs(_ROW)),
)


def find_pairs(
    text: str,
    layout: Callable[[str], List[RawPair]],
    *,
    max_question_number: int,
) -> List[Tuple[int, int]]:
    """
    Well-formed (question number, choice index) pairs for one layout.

    Pairs with an implausible question number or an unrecognized label
    are dropped.
    """
    pairs = []
    for number, label in layout(text):
        if 1 <= number <= max_question_number and is_choice_label(label):
            pairs.append((number, normalize_choice_label(label)))
    return pairs


def _distinct_numbers(pairs: List[Tuple[int, int]]) -> int:
    return len({number for number, _ in pairs})


def parse_answer_key(
    full_text: str,
    config: Optional[ExtractionConfig] = None,
) -> AnswerKey:
    """
    Parse an answer document into an AnswerKey.

    Every layout is evaluated; the winner has the most distinct question
    numbers, with ties going to the earlier layout. When the winning layout
    repeats a question number the last occurrence wins and the number is
    reported in ``AnswerKey.duplicates``.

    Args:
        full_text: Concatenated answer document text
        config: Extraction settings (defaults used if None)

    Returns:
        AnswerKey, empty if no layout matched

    Example:
        >>> key = parse_answer_key("問1: 2\\n問2: 4")
        >>> key.answers, key.layout
        ({1: 1, 2: 3}, 'inline')
    """
    config = config or ExtractionConfig()
    text = clean_text(full_text)
    if not text:
        return AnswerKey()

    best = select_best(
        [
            (
                name,
                lambda layout=layout: find_pairs(
                    text, layout, max_question_number=config.max_question_number
                ),
            )
            for name, layout in LAYOUTS
        ],
        score=_distinct_numbers,
    )
    if best is None:
        logger.debug("No answer-key layout matched")
        return AnswerKey()

    answers: Dict[int, int] = {}
    for number, index in best.value:
        answers[number] = index
    counts = Counter(number for number, _ in best.value)
    duplicates = tuple(sorted(n for n, c in counts.items() if c > 1))
    if duplicates:
        logger.warning(
            f"Answer key repeats question numbers {list(duplicates)}; last occurrence kept"
        )

    logger.debug(f"Parsed {len(answers)} answers using '{best.name}' layout")
    return AnswerKey(answers=answers, layout=best.name, duplicates=duplicates)
