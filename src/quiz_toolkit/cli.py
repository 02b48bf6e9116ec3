"""
Command-line extraction of multiple-choice questions from exam PDFs.

Usage:
    quiz-extract questions.pdf --answers answers.pdf --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from quiz_toolkit.core.models import DocumentResult, ProgressSnapshot
from quiz_toolkit.extractor import (
    BatchConfig,
    ExtractionConfig,
    OcrConfig,
    SegmentationFailure,
    process_question_answer_set,
)
from quiz_toolkit.extractor.timing import TimingLog

logger = logging.getLogger("quiz_toolkit.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz-extract",
        description="Extract multiple-choice questions from a question PDF",
    )
    parser.add_argument("questions", type=Path, help="Question document (PDF)")
    parser.add_argument("--answers", type=Path, help="Answer document (PDF)")
    parser.add_argument("--chunk-size", type=int, default=BatchConfig().chunk_size,
                        help="Pages processed concurrently per chunk")
    parser.add_argument("--scale", type=float, default=OcrConfig().render_scale,
                        help="Render scale for OCR fallback")
    parser.add_argument("--lang", default=OcrConfig().language_profile,
                        help="Tesseract language profile")
    parser.add_argument("--no-preprocess", action="store_true",
                        help="Skip image preprocessing before OCR")
    parser.add_argument("--placeholder", default=ExtractionConfig().placeholder_choice,
                        help="Text used to pad missing choices")
    parser.add_argument("--category", help="Category id passed through to the output")
    parser.add_argument("--infer-category", action="store_true",
                        help="Include the first question's text as a category hint")
    parser.add_argument("--timings", type=Path, help="Write phase timings to this JSON file")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> ExtractionConfig:
    return ExtractionConfig(
        placeholder_choice=args.placeholder,
        ocr=OcrConfig(
            render_scale=args.scale,
            language_profile=args.lang,
            preprocess=not args.no_preprocess,
        ),
        batch=BatchConfig(chunk_size=args.chunk_size),
    )


def _print_progress(snapshot: ProgressSnapshot) -> None:
    logger.info(f"[{snapshot.status}] {snapshot.message}")


def _print_summary(result: DocumentResult) -> None:
    parsed = result.parse_result
    print(f"Questions: {len(parsed.questions)}")
    print(f"Answered:  {parsed.answered_count}")
    print(f"Quality:   {parsed.quality_score}/100")
    for q in parsed.questions:
        answer = "-" if q.correct_choice_index is None else str(q.correct_choice_index + 1)
        print(f"\n[{q.question_number}] {q.question_text}  (answer: {answer})")
        for i, choice in enumerate(q.choices, start=1):
            print(f"    {i}. {choice}")
    if parsed.issues:
        print("\nIssues:")
        for issue in parsed.issues:
            print(f"  - {issue}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        question_pdf = args.questions.read_bytes()
        answer_pdf = args.answers.read_bytes() if args.answers else None
    except OSError as e:
        print(f"Cannot read input: {e}", file=sys.stderr)
        return 2

    timing_log = TimingLog() if args.timings else None
    try:
        result = process_question_answer_set(
            question_pdf,
            answer_pdf,
            config=config,
            on_progress=_print_progress,
            category_id=args.category,
            infer_category=args.infer_category,
            timing_log=timing_log,
        )
    except SegmentationFailure as e:
        if args.json:
            print(json.dumps(e.to_dict(), ensure_ascii=False, indent=2))
        else:
            print(f"Extraction failed: {e}", file=sys.stderr)
            print(f"Text length: {e.text_length}", file=sys.stderr)
            for key, value in e.analysis.items():
                print(f"  {key}: {value}", file=sys.stderr)
            print(e.recommendation, file=sys.stderr)
            if e.sample:
                print("--- sample ---", file=sys.stderr)
                print(e.sample, file=sys.stderr)
        return 1
    finally:
        if timing_log is not None:
            timing_log.save(args.timings)

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_summary(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
