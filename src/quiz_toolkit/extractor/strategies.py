"""
Module: extractor.strategies

Purpose:
    "Try every candidate, keep the best" selection shared by the segmenter,
    the choice extractor and the answer-key parser. Each caller supplies an
    ordered list of named strategies; the highest score wins and ties go to
    the strategy declared first.

Key Classes:
    - Candidate: Outcome of one strategy with its score

Key Functions:
    - select_best(): Run strategies and return the winning candidate

Used By:
    - extractor.detection.segmenter
    - extractor.detection.choices
    - extractor.answers.answer_key
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """Outcome of a single strategy."""
    name: str
    value: T
    score: int


def select_best(
    strategies: Sequence[Tuple[str, Callable[[], T]]],
    score: Callable[[T], int],
) -> Optional[Candidate[T]]:
    """
    Evaluate every strategy and keep the highest-scoring outcome.

    A later strategy replaces the current best only with a strictly
    greater score, so ties resolve to declaration order. Strategies
    scoring zero never win.

    Args:
        strategies: (name, thunk) pairs in priority order
        score: Maps a strategy outcome to a non-negative score

    Returns:
        Winning Candidate, or None when every strategy scored zero

    Example:
        >>> best = select_best(
        ...     [("short", lambda: [1]), ("long", lambda: [1, 2])], len)
        >>> best.name
        'long'
    """
    best: Optional[Candidate[T]] = None
    for name, run in strategies:
        value = run()
        points = score(value)
        logger.debug(f"Strategy '{name}' scored {points}")
        if points > 0 and (best is None or points > best.score):
            best = Candidate(name=name, value=value, score=points)
    return best
