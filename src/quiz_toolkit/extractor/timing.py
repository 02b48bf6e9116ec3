"""
Module: extractor.timing

Purpose:
    Timing instrumentation for the extraction pipeline, to show where a
    document spends its time (page acquisition, segmentation, choice
    extraction per question, answer parsing).

Key Classes:
    - TimingLog: Collects document-level and question-level durations

Key Functions:
    - timed_phase: Context manager for timing code blocks

Dependencies:
    - time (std)
    - contextlib (std)
    - dataclasses (std)

Used By:
    - extractor.pipeline: Document orchestrator
    - cli: Optional timing export
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """
    Timing metrics for one extraction run.

    Attributes:
        document_timings: phase_name -> duration_seconds
        question_timings: question_id -> {phase_name -> duration_seconds}

    Example:
        >>> log = TimingLog()
        >>> log.log_document("segmentation", 0.012)
        >>> log.log_question("q3", "choice_extraction", 0.001)
        >>> print(log.summary())
    """
    document_timings: Dict[str, float] = field(default_factory=dict)
    question_timings: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def log_document(self, phase: str, duration: float) -> None:
        """Log a document-level timing metric (repeated phases accumulate)."""
        self.document_timings[phase] = self.document_timings.get(phase, 0.0) + duration

    def log_question(self, question_id: str, phase: str, duration: float) -> None:
        """Log a question-level timing metric."""
        self.question_timings.setdefault(question_id, {})[phase] = duration

    def get_phase_averages(self) -> Dict[str, float]:
        """Average time per phase across all questions."""
        totals: Dict[str, float] = {}
        counts: Dict[str, int] = {}
        for phases in self.question_timings.values():
            for phase, duration in phases.items():
                totals[phase] = totals.get(phase, 0.0) + duration
                counts[phase] = counts.get(phase, 0) + 1
        return {phase: totals[phase] / counts[phase] for phase in totals}

    def get_slowest_questions(self, n: int = 3) -> List[Tuple[str, float]]:
        """The N slowest questions with their total time."""
        totals = [(qid, sum(phases.values())) for qid, phases in self.question_timings.items()]
        totals.sort(key=lambda x: x[1], reverse=True)
        return totals[:n]

    def summary(self) -> str:
        """Human-readable timing summary."""
        lines = ["", "=== Extraction Timing Summary ==="]

        if self.document_timings:
            lines.append("Document-level:")
            for phase, duration in sorted(self.document_timings.items()):
                lines.append(f"  {phase:25s} {duration:.3f}s")

        averages = self.get_phase_averages()
        if averages:
            lines.append("")
            lines.append("Question-level averages:")
            for phase, avg in sorted(averages.items(), key=lambda x: -x[1]):
                lines.append(f"  {phase:25s} {avg:.4f}s")

        slowest = self.get_slowest_questions(3)
        if slowest:
            lines.append("")
            lines.append("Slowest questions:")
            for qid, total in slowest:
                lines.append(f"  {qid}: {total:.4f}s")

        lines.append("")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Export timing data as dictionary."""
        return {
            "document_timings": self.document_timings,
            "question_timings": self.question_timings,
            "phase_averages": self.get_phase_averages(),
            "slowest_questions": [
                {"id": qid, "total": total} for qid, total in self.get_slowest_questions(5)
            ],
        }

    def save(self, path: Path) -> None:
        """Write timing data to a JSON file."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Saved timing data to {path}")


@contextmanager
def timed_phase(
    log: Optional[TimingLog],
    phase: str,
    question_id: Optional[str] = None,
) -> Generator[None, None, None]:
    """
    Context manager for timing a code phase.

    Args:
        log: TimingLog to record into; timing is skipped when None
        phase: Name of the phase being timed
        question_id: If provided, records a question-level metric;
            otherwise a document-level metric

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "segmentation"):
        ...     blocks = segment(text)
    """
    if log is None:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if question_id:
            log.log_question(question_id, phase, elapsed)
        else:
            log.log_document(phase, elapsed)
