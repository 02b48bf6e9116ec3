"""
Module: extractor.detection.choices

Purpose:
    Choice extraction - isolates up to five labelled answer choices from a
    question block and returns the remaining question text. Four label
    alphabets are tried (digits, Latin letters, katakana, circled digits)
    and the one yielding the most choices wins.

Key Functions:
    - extract_choices(): Split a RawBlock into question text and choices
    - strip_question_marker(): Remove a leading question-number marker
    - strip_boilerplate(): Remove trailing instruction phrases
    - find_inline_answer(): Locate "答え：3" style answer markers

Key Classes:
    - ChoiceAlphabet: Label symbols plus their token patterns
    - ChoiceExtraction: Result of extracting one block

Dependencies:
    - re (std)
    - extractor.strategies: Best-candidate selection
    - extractor.labels: Label normalization

Used By:
    - extractor.pipeline: Builds ExtractedQuestions from blocks
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from quiz_toolkit.core.models import CHOICE_SLOTS, RawBlock

from ..config import ExtractionConfig
from ..labels import clean_text, is_choice_label, normalize_choice_label
from ..strategies import select_best

logger = logging.getLogger(__name__)

# A label token must open a line or follow whitespace
_TOKEN_PREFIX = r"(?:^|(?<=\s))"


@dataclass(frozen=True)
class ChoiceAlphabet:
    """
    One choice-label alphabet.

    Attributes:
        name: Identifier reported on ChoiceExtraction.alphabet
        tokens: One compiled token pattern per label, in presentation order
    """
    name: str
    tokens: Tuple[re.Pattern, ...]


def _alphabet(name: str, labels: List[str], template: str) -> ChoiceAlphabet:
    return ChoiceAlphabet(
        name=name,
        tokens=tuple(
            re.compile(_TOKEN_PREFIX + template.format(label=label), re.MULTILINE)
            for label in labels
        ),
    )


ALPHABETS: Tuple[ChoiceAlphabet, ...] = (
    # 1. / 1) / (1) / （1）, but never the "1." of "1.5"
    _alphabet(
        "digits",
        ["1", "2", "3", "4", "5"],
        r"(?:[(（]{label}[)）]|{label}[ \t]*[.．)）:：、](?!\d))[ \t]*",
    ),
    # a. / B) / (c)
    _alphabet(
        "latin",
        ["[aA]", "[bB]", "[cC]", "[dD]", "[eE]"],
        r"(?:[(（]{label}[)）]|{label}[.．)）:：](?![A-Za-z]))[ \t]*",
    ),
    # ア. / (イ) / ウ followed by a space
    _alphabet(
        "kana",
        ["ア", "イ", "ウ", "エ", "オ"],
        r"(?:[(（]{label}[)）]|{label}[ \t]*[.．)）:：、]|{label}(?=[ \t]))[ \t]*",
    ),
    # ① needs no delimiter
    _alphabet("circled", ["①", "②", "③", "④", "⑤"], r"{label}[ \t]*"),
)


# (token start, content start, content end, content)
_ChoiceSpan = Tuple[int, int, int, str]

_LEADING_MARKER = re.compile(
    r"^(?:(?:問題?|Question|Q)[ \t]*\d{1,3}|第[ \t]*\d{1,3}[ \t]*問|\d{1,3}[ \t]*[.．)）:：](?!\d))"
    r"[ \t]*[.．:：)）、]?[ \t]*"
)

_BOILERPLATE = re.compile(
    r"[ \t\n]*(?:"
    r"which of the following (?:is|are) (?:correct|true|incorrect|false|most appropriate)"
    r"|choose the (?:most appropriate|best|correct) (?:answer|option|one)"
    r"|select (?:one|the correct answer|the best answer)"
    r"|(?:次のうち|以下のうち|下記のうち)?(?:正しい|誤っている|誤った|適切な|適切でない|不適切な)ものはどれか"
    r"|(?:最も|もっとも)?(?:適切|正しい|適当)なものを(?:1|１|一)つ選べ"
    r")[ \t]*[?？。.]*[ \t\n]*$",
    re.IGNORECASE,
)

_ANSWER_LABEL = r"[1-5１-５a-eA-Eア-オあいうえお①-⑤]"
_INLINE_ANSWER = re.compile(
    r"(?:答え|解答|正解|正答|[Aa]nswer)[ \t]*(?:は|が)?[ \t]*[:：]?[ \t]*"
    r"[(（]?(" + _ANSWER_LABEL + r")[)）]?番?(?!\w)"
)


@dataclass(frozen=True)
class ChoiceExtraction:
    """
    Question text and choices extracted from one block.

    Attributes:
        question_text: Block text with choices and boilerplate removed
        choices: Exactly five choices, padded with the placeholder
        choice_count: Number of choices found in the source (0-5)
        alphabet: Name of the winning alphabet, None if no choices
        inline_answer: 0-based index from an in-block answer marker
    """
    question_text: str
    choices: Tuple[str, ...]
    choice_count: int = 0
    alphabet: Optional[str] = None
    inline_answer: Optional[int] = None


def strip_question_marker(text: str) -> str:
    """Remove a leading question-number marker such as "問1." or "12)"."""
    return _LEADING_MARKER.sub("", text, count=1).lstrip()


def strip_boilerplate(text: str) -> str:
    """
    Remove trailing instruction phrases ("正しいものはどれか" etc).

    The text is returned unchanged when stripping would leave nothing.
    """
    stripped = _BOILERPLATE.sub("", text).rstrip()
    return stripped if stripped else text


def find_inline_answer(text: str) -> Tuple[str, Optional[int]]:
    """
    Locate and remove an inline answer marker ("答え：3", "正解は イ").

    Returns:
        (text without the marker, 0-based answer index or None)
    """
    match = _INLINE_ANSWER.search(text)
    if match is None or not is_choice_label(match.group(1)):
        return text, None
    remaining = clean_text(text[: match.start()] + text[match.end():])
    return remaining, normalize_choice_label(match.group(1))


def _find_choices(text: str, alphabet: ChoiceAlphabet) -> List[_ChoiceSpan]:
    """Walk labels in presentation order, stopping at the first missing one."""
    found: List[Tuple[int, int]] = []
    pos = 0
    for token in alphabet.tokens:
        match = token.search(text, pos)
        if match is None:
            break
        found.append((match.start(), match.end()))
        pos = match.end()

    spans: List[_ChoiceSpan] = []
    for i, (start, content_start) in enumerate(found):
        if i + 1 < len(found):
            content_end = found[i + 1][0]
        else:
            # The last choice ends at a blank line
            blank = text.find("\n\n", content_start)
            content_end = len(text) if blank == -1 else blank
        content = " ".join(text[content_start:content_end].split())
        spans.append((start, content_start, content_end, content))
    return spans


def _remove_spans(text: str, spans: List[_ChoiceSpan]) -> str:
    parts = []
    pos = 0
    for start, _, end, _ in spans:
        parts.append(text[pos:start])
        pos = end
    parts.append(text[pos:])
    return clean_text("\n".join(p.strip() for p in parts if p.strip()))


def extract_choices(
    block: RawBlock,
    config: Optional[ExtractionConfig] = None,
) -> ChoiceExtraction:
    """
    Split a question block into question text and five choices.

    Every alphabet is tried; the one producing the most choices wins,
    with ties going to the earlier alphabet. Fewer than two choices never
    count. Labels must appear in presentation order: a "3." before any
    "2." is treated as question text.

    Args:
        block: Question block from the segmenter
        config: Extraction settings (defaults used if None)

    Returns:
        ChoiceExtraction with exactly five choices

    Example:
        >>> block = RawBlock("問1. What is X?\\n1. A\\n2. B", start_offset=0, number=1)
        >>> result = extract_choices(block)
        >>> result.question_text, result.choices[:3]
        ('What is X?', ('A', 'B', '—'))
    """
    config = config or ExtractionConfig()
    text = clean_text(block.text)
    if block.number is not None:
        text = strip_question_marker(text)
    text, inline_answer = find_inline_answer(text)

    def score(spans: List[_ChoiceSpan]) -> int:
        return len(spans) if len(spans) >= config.min_choices else 0

    best = select_best(
        [
            (alphabet.name, lambda a=alphabet: _find_choices(text, a))
            for alphabet in ALPHABETS
        ],
        score=score,
    )

    if best is None:
        spans: List[_ChoiceSpan] = []
        question_text = text
        alphabet_name = None
    else:
        spans = best.value
        question_text = _remove_spans(text, spans)
        alphabet_name = best.name

    question_text = strip_boilerplate(strip_question_marker(question_text) or question_text)

    choices = [content for _, _, _, content in spans][:CHOICE_SLOTS]
    choice_count = len(choices)
    choices += [config.placeholder_choice] * (CHOICE_SLOTS - choice_count)

    logger.debug(
        f"Block {block.number}: {choice_count} choices via {alphabet_name or 'none'}"
    )
    return ChoiceExtraction(
        question_text=question_text.strip(),
        choices=tuple(choices),
        choice_count=choice_count,
        alphabet=alphabet_name,
        inline_answer=inline_answer,
    )
