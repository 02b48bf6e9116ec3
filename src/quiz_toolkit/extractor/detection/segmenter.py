"""
Module: extractor.detection.segmenter

Purpose:
    Question segmentation - splits a document's concatenated page text into
    one block per question. Several numbering conventions are tried and the
    one that finds the most well-formed question starts wins. Documents
    with no recognizable numbering fall back to blank-line paragraphs.

Key Functions:
    - segment(): Split full document text into RawBlocks
    - find_question_starts(): Plausible question starts for one convention

Key Classes:
    - NumberingStrategy: A named question-number pattern

Dependencies:
    - re (std)
    - extractor.strategies: Best-candidate selection

Used By:
    - extractor.pipeline: Segments question documents
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from quiz_toolkit.core.models import RawBlock

from ..config import ExtractionConfig
from ..labels import clean_text
from ..strategies import select_best

logger = logging.getLogger(__name__)

PARAGRAPH_PATTERN = "paragraph"

# (number, offset of the marker in the cleaned text)
QuestionStart = Tuple[int, int]


@dataclass(frozen=True)
class NumberingStrategy:
    """
    A question-numbering convention.

    Attributes:
        name: Identifier reported on RawBlock.pattern
        pattern: Regex whose first group is the question number
        min_body_length: Required characters after the marker on the same
            line, 0 for no requirement
    """
    name: str
    pattern: re.Pattern
    min_body_length: int = 0


def _strategies(config: ExtractionConfig) -> List[NumberingStrategy]:
    return [
        # 問1 / 問題 12 / Question 3: / Q4) at the start of a line
        NumberingStrategy(
            "marker",
            re.compile(
                r"^[ \t]*(?:問題?|Question|Q)[ \t]*(\d{1,3})(?!\d)[ \t]*[.．:：)）、]?",
                re.MULTILINE,
            ),
        ),
        # 12. / 12) / 12： at the start of a line
        NumberingStrategy(
            "numbered_line",
            re.compile(r"^[ \t]*(\d{1,3})[ \t]*[.．)）:：](?!\d)[ \t]*", re.MULTILINE),
            min_body_length=config.min_numbered_body_length,
        ),
        # 第3問
        NumberingStrategy("dai_mon", re.compile(r"第[ \t]*(\d{1,3})[ \t]*問")),
    ]


def _line_body(text: str, start: int) -> str:
    end = text.find("\n", start)
    return text[start:] if end == -1 else text[start:end]


def find_question_starts(
    text: str,
    strategy: NumberingStrategy,
    *,
    max_question_number: int,
) -> List[QuestionStart]:
    """
    Find well-formed question starts for one numbering convention.

    A match counts only if its number is within 1..max_question_number.
    Numbering may restart or run out of order; every plausible match is
    kept in text order.

    Args:
        text: Cleaned document text
        strategy: Numbering convention to apply
        max_question_number: Largest plausible question number

    Returns:
        (number, offset) pairs in text order
    """
    starts: List[QuestionStart] = []
    for match in strategy.pattern.finditer(text):
        number = int(match.group(1))
        if not (1 <= number <= max_question_number):
            continue
        if strategy.min_body_length:
            body = _line_body(text, match.end()).strip()
            if len(body) < strategy.min_body_length:
                continue
        starts.append((number, match.start()))
    return starts


def _blocks_from_starts(
    text: str,
    starts: List[QuestionStart],
    pattern: str,
) -> List[RawBlock]:
    blocks: List[RawBlock] = []
    for i, (number, offset) in enumerate(starts):
        end = starts[i + 1][1] if i + 1 < len(starts) else len(text)
        body = text[offset:end].strip()
        if body:
            blocks.append(
                RawBlock(text=body, start_offset=offset, number=number, pattern=pattern)
            )
    return blocks


_PARAGRAPH = re.compile(r"\S.*?(?=\n[ \t]*\n|\Z)", re.DOTALL)


def split_paragraphs(text: str, min_length: int) -> List[RawBlock]:
    """
    Split text on blank lines, keeping paragraphs longer than min_length.

    Short paragraphs are headers, footers and page numbers.
    """
    blocks = []
    for match in _PARAGRAPH.finditer(text):
        body = match.group(0).strip()
        if len(body) > min_length:
            blocks.append(RawBlock(text=body, start_offset=match.start()))
    return blocks


def segment(
    full_text: str,
    config: Optional[ExtractionConfig] = None,
) -> List[RawBlock]:
    """
    Split document text into question blocks.

    Every numbering strategy is evaluated; the one with the strictly
    greatest number of question starts wins and ties go to the strategy
    declared first. Each block runs from one question marker to the next.
    When no strategy finds anything the text is split into paragraphs.

    Args:
        full_text: Concatenated page text (cleaned here if not already)
        config: Extraction settings (defaults used if None)

    Returns:
        Blocks in order of appearance; empty if nothing usable was found

    Example:
        >>> blocks = segment("問1 first question\\n問2 second question")
        >>> [b.number for b in blocks]
        [1, 2]
    """
    config = config or ExtractionConfig()
    text = clean_text(full_text)
    if not text:
        return []

    best = select_best(
        [
            (
                strategy.name,
                lambda s=strategy: find_question_starts(
                    text, s, max_question_number=config.max_question_number
                ),
            )
            for strategy in _strategies(config)
        ],
        score=len,
    )

    if best is not None:
        blocks = _blocks_from_starts(text, best.value, best.name)
        logger.debug(f"Segmented {len(blocks)} blocks using '{best.name}' numbering")
        return blocks

    blocks = split_paragraphs(text, config.min_paragraph_length)
    logger.debug(
        f"No question numbering found; paragraph fallback produced {len(blocks)} blocks"
    )
    return blocks
