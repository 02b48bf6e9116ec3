"""
Module: extractor.labels

Purpose:
    Text cleaning and choice-label normalization. Every choice alphabet
    printed on exam papers (digits, Latin letters, katakana, hiragana,
    circled digits, full-width forms) maps to one 0-based index.

Key Functions:
    - clean_text(): Normalize whitespace and strip invisible characters
    - normalize_choice_label(): Map any choice label to an index 0-4
    - is_choice_label(): Check a label is recognized before normalizing
    - canonical_label(): Inverse of normalize_choice_label

Dependencies:
    - re (std)
    - unicodedata (std)

Used By:
    - extractor.detection.choices
    - extractor.answers.answer_key
    - extractor.pipeline
"""

from __future__ import annotations

import re
import unicodedata
from typing import Dict, Optional

_INVISIBLE = dict.fromkeys(map(ord, "\u200b\u200c\u200d\u2060\ufeff"), None)
_SPACES = {ord("\u00a0"): " ", ord("\u3000"): " ", ord("\t"): " "}

_HORIZONTAL_RUN = re.compile(r"[ \f\v]+")
_TRAILING_SPACE = re.compile(r" +\n")
_LEADING_SPACE = re.compile(r"\n +")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

# Brackets and delimiters that may surround a printed label
_LABEL_DECORATION = "()（）[]［］.．:：、,"

_LABEL_INDEX: Dict[str, int] = {
    **{str(n): n - 1 for n in range(1, 6)},
    "0": 0,
    **{letter: i for i, letter in enumerate("abcde")},
    **{kana: i for i, kana in enumerate("アイウエオ")},
    **{kana: i for i, kana in enumerate("あいうえお")},
}


def clean_text(text: str) -> str:
    """
    Normalize raw page text before any pattern matching.

    Strips zero-width characters, converts non-breaking and ideographic
    spaces, normalizes line endings and collapses runs of whitespace.
    Line structure is preserved, with at most one blank line in a row.

    Args:
        text: Raw text from a text layer or recognizer

    Returns:
        Cleaned text, trimmed at both ends

    Example:
        >>> clean_text("問1\\u3000次の  うち\\r\\n\\r\\n\\r\\n1. A")
        '問1 次の うち\\n\\n1. A'
    """
    if not text:
        return ""
    text = text.translate(_INVISIBLE).translate(_SPACES)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_RUN.sub(" ", text)
    text = _TRAILING_SPACE.sub("\n", text)
    text = _LEADING_SPACE.sub("\n", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


def _label_key(raw: str) -> str:
    # NFKC folds full-width forms, half-width kana and circled digits
    key = unicodedata.normalize("NFKC", raw or "").strip()
    key = key.strip(_LABEL_DECORATION).strip()
    return key.lower()


def _lookup(raw: str) -> Optional[int]:
    return _LABEL_INDEX.get(_label_key(raw))


def is_choice_label(raw: str) -> bool:
    """Return True if ``raw`` is a recognized choice label."""
    return _lookup(raw) is not None


def normalize_choice_label(raw: str) -> int:
    """
    Map a printed choice label to a 0-based choice index.

    Total: unrecognized input maps to 0. Use is_choice_label() first when
    "unrecognized" must be told apart from "first choice".

    Args:
        raw: Label as printed, e.g. "3", "(c)", "ウ", "③", "３．"

    Returns:
        Index in [0, 4]

    Example:
        >>> normalize_choice_label("ウ"), normalize_choice_label("(c)")
        (2, 2)
        >>> normalize_choice_label("?")
        0
    """
    index = _lookup(raw)
    return 0 if index is None else index


def canonical_label(index: int) -> str:
    """
    Canonical printed form of a choice index ("1".."5").

    Raises:
        ValueError: If index is outside [0, 4]
    """
    if not (0 <= index <= 4):
        raise ValueError(f"choice index must be 0-4: {index}")
    return str(index + 1)
