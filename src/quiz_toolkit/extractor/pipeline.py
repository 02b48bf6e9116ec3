"""
Module: extractor.pipeline

Purpose:
    Orchestrates extraction for a question document and an optional answer
    document: page text acquisition in chunks, segmentation, choice
    extraction, answer-key parsing, reconciliation and quality scoring.

Key Functions:
    - parse_question_text(): Text-only path (already extracted text)
    - process_documents(): Page providers in, DocumentResult out
    - process_question_answer_set(): PDF bytes in, DocumentResult out
    - analyze_content(): Diagnostics for text that could not be segmented

Dependencies:
    - extractor.detection: Segmentation and choice extraction
    - extractor.answers: Answer-key parsing
    - extractor.batch: Chunked page processing and progress
    - extractor.sources: PDF access and recognition

Used By:
    - cli: Command-line extraction
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from quiz_toolkit.common.thresholds import DIAGNOSTIC_THRESHOLDS
from quiz_toolkit.core.models import (
    AnswerKey,
    BatchResult,
    DocumentResult,
    ExtractedQuestion,
    JobStatus,
    ParseResult,
    RawBlock,
)

from . import quality
from .answers import parse_answer_key
from .batch import BatchCoordinator, InMemoryJobStore, JobStore, new_job_id
from .batch.coordinator import ProgressCallback
from .config import ExtractionConfig
from .detection import extract_choices, segment
from .errors import CollaboratorFailure, SegmentationFailure
from .labels import clean_text
from .reconcile import reconcile
from .sources import PageProvider, PageTextSource, PdfPageProvider, TesseractRecognizer
from .sources.page_text import RecognizerFactory
from .timing import TimingLog, timed_phase

logger = logging.getLogger(__name__)

_MANUAL_ENTRY = (
    "Try a higher-resolution or text-based PDF, or enter the questions manually."
)


def analyze_content(text: str) -> Dict[str, Any]:
    """Content flags explaining why text could not be segmented."""
    return {
        "text_length": len(text),
        "has_digits": bool(re.search(r"\d", text)),
        "has_japanese": quality.japanese_ratio(text) > 0,
        "has_latin": bool(re.search(r"[A-Za-z]", text)),
        "has_question_marks": bool(re.search(r"[?？]", text)),
        "has_choice_markers": bool(re.search(r"[1-5ア-オa-eA-E①-⑤]", text)),
        "line_count": len(text.split("\n")) if text else 0,
        "word_count": len(text.split()),
    }


def _recommendation(analysis: Dict[str, Any]) -> str:
    if analysis["text_length"] < 100:
        finding = "Very little text was found; recognition may not have worked."
    elif not (analysis["has_japanese"] or analysis["has_latin"]):
        finding = "Characters were not recognized; check the scan quality."
    elif not (analysis["has_question_marks"] or analysis["has_choice_markers"]):
        finding = "No question or choice formatting was recognized."
    else:
        finding = "Text was found but could not be split into questions."
    return f"{finding} {_MANUAL_ENTRY}"


def _segmentation_failure(message: str, text: str) -> SegmentationFailure:
    analysis = analyze_content(text)
    return SegmentationFailure(
        message,
        text_length=len(text),
        sample=text[: DIAGNOSTIC_THRESHOLDS.sample_chars],
        analysis=analysis,
        recommendation=_recommendation(analysis),
    )


def build_questions(
    blocks: List[RawBlock],
    config: ExtractionConfig,
    timing_log: Optional[TimingLog] = None,
) -> Tuple[List[ExtractedQuestion], Dict[int, int], List[str]]:
    """
    Extract a question from every block.

    Blocks without a printed number are numbered by position. Blocks left
    with no question text once choices are removed are skipped.

    Returns:
        (questions, inline answers by question number, issues)
    """
    questions: List[ExtractedQuestion] = []
    inline_answers: Dict[int, int] = {}
    issues: List[str] = []

    for position, block in enumerate(blocks, start=1):
        number = block.number if block.number is not None else position
        with timed_phase(timing_log, "choice_extraction", question_id=f"q{number}"):
            extraction = extract_choices(block, config)

        if not extraction.question_text.strip():
            issues.append(f"Question {number} skipped: no question text")
            logger.warning(issues[-1])
            continue
        if extraction.choice_count == 0:
            issues.append(f"Question {number}: no choices found")

        questions.append(
            ExtractedQuestion(
                question_number=number,
                question_text=extraction.question_text,
                choices=extraction.choices,
                choice_count=extraction.choice_count,
            )
        )
        if extraction.inline_answer is not None:
            inline_answers[number] = extraction.inline_answer
        logger.debug(
            f"Question {number}: "
            f"{extraction.question_text[:DIAGNOSTIC_THRESHOLDS.preview_chars]!r}"
        )

    return questions, inline_answers, issues


def parse_question_text(
    question_text: str,
    answer_text: Optional[str] = None,
    *,
    config: Optional[ExtractionConfig] = None,
    timing_log: Optional[TimingLog] = None,
) -> ParseResult:
    """
    Parse already-extracted document text into a scored ParseResult.

    When ``answer_text`` is None, inline answer markers in the question
    document ("答え：3") are used as the answer key.

    Args:
        question_text: Text of the question document
        answer_text: Text of the answer document, if any
        config: Extraction settings (defaults used if None)
        timing_log: Optional TimingLog for phase durations

    Returns:
        ParseResult with reconciled questions, issues and quality score

    Raises:
        SegmentationFailure: If no questions can be found

    Example:
        >>> result = parse_question_text("問1. What is X?\\n1. A\\n2. B\\n3. C\\n4. D\\n5. E\\n")
        >>> result.questions[0].choices
        ('A', 'B', 'C', 'D', 'E')
    """
    config = config or ExtractionConfig()
    text = clean_text(question_text)
    if not text:
        raise _segmentation_failure("No usable text in the question document", text)

    with timed_phase(timing_log, "segmentation"):
        blocks = segment(text, config)
    if not blocks:
        raise _segmentation_failure("No question blocks found", text)

    questions, inline_answers, issues = build_questions(blocks, config, timing_log)
    if not questions:
        raise _segmentation_failure("No question text found in any block", text)

    if answer_text is not None:
        with timed_phase(timing_log, "answer_parsing"):
            answer_key = parse_answer_key(answer_text, config)
        if not len(answer_key):
            issues.append("No answers found in the answer document")
    else:
        answer_key = AnswerKey(
            answers=inline_answers,
            layout="inline_marker" if inline_answers else None,
        )

    result = reconcile(questions, answer_key)
    report = quality.report_for(result, text)
    score = report.score
    issues.extend(
        f"Quality: {issue}; {advice}"
        for issue, advice in zip(report.issues, report.recommendations)
    )
    logger.info(
        f"Parsed {len(result.questions)} questions ({result.answered_count} answered), "
        f"quality {score}",
        extra={
            "questions": len(result.questions),
            "answers": result.total_answers,
            "quality_score": score,
        },
    )
    return replace(result, quality_score=score, issues=tuple(issues) + result.issues)


def _run_batch(
    pages: PageProvider,
    job_id: str,
    config: ExtractionConfig,
    recognizer_factory: Optional[RecognizerFactory],
    store: JobStore,
    on_progress: Optional[ProgressCallback],
    cancel: Optional[threading.Event],
) -> BatchResult:
    source = PageTextSource(pages, recognizer_factory, config.ocr)
    coordinator = BatchCoordinator(source.get_page_text, store, config.batch)
    return coordinator.run(
        job_id, source.page_count, on_progress=on_progress, cancel=cancel
    )


def process_documents(
    question_pages: PageProvider,
    answer_pages: Optional[PageProvider] = None,
    *,
    config: Optional[ExtractionConfig] = None,
    recognizer_factory: Optional[RecognizerFactory] = None,
    store: Optional[JobStore] = None,
    job_id: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
    category_id: Optional[str] = None,
    infer_category: bool = False,
    timing_log: Optional[TimingLog] = None,
) -> DocumentResult:
    """
    Extract questions from a question document and optional answer document.

    Pages are fetched in chunks under ``job_id`` (answer pages under
    ``<job_id>-answers``), so progress can be polled from ``store``. After
    parsing, the question job's snapshot is updated with the number of
    extracted questions.

    Args:
        question_pages: Question document pages
        answer_pages: Answer document pages, if any
        config: Extraction settings (defaults used if None)
        recognizer_factory: Creates a recognizer per page; None disables OCR
        store: Job registry for progress polling
        job_id: Identifier for progress (generated if None)
        on_progress: Synchronous progress callback
        cancel: Set to stop processing at the next chunk boundary
        category_id: Passed through to the result unchanged
        infer_category: Attach the first question's text as category_hint
        timing_log: Optional TimingLog for phase durations

    Returns:
        DocumentResult for the persistence collaborator

    Raises:
        SegmentationFailure: If no usable text or no questions were found
    """
    config = config or ExtractionConfig()
    store = store if store is not None else InMemoryJobStore()
    job_id = job_id or new_job_id()

    with timed_phase(timing_log, "question_pages"):
        question_batch = _run_batch(
            question_pages, job_id, config, recognizer_factory, store, on_progress, cancel
        )

    if question_batch.status is JobStatus.CANCELLED:
        logger.info(f"Job {job_id} cancelled; skipping parsing", extra={"job_id": job_id})
        return DocumentResult(
            parse_result=ParseResult(issues=("Processing was cancelled",) + question_batch.issues),
            question_pages=question_batch,
            category_id=category_id,
        )

    answer_batch: Optional[BatchResult] = None
    if answer_pages is not None:
        with timed_phase(timing_log, "answer_pages"):
            answer_batch = _run_batch(
                answer_pages, f"{job_id}-answers", config, recognizer_factory, store, None, cancel
            )

    question_text = question_batch.text
    try:
        if not question_text:
            raise _segmentation_failure(
                f"No usable text on any of {len(question_batch.pages)} pages", question_text
            )
        parse_result = parse_question_text(
            question_text,
            answer_batch.text if answer_batch is not None else None,
            config=config,
            timing_log=timing_log,
        )
    except SegmentationFailure as e:
        _finish_snapshot(store, job_id, on_progress, status=JobStatus.ERROR, message=str(e))
        logger.warning(
            f"Job {job_id}: {e}",
            extra={"job_id": job_id, "text_length": e.text_length},
        )
        raise

    batch_issues = question_batch.issues + (answer_batch.issues if answer_batch else ())
    parse_result = replace(parse_result, issues=parse_result.issues + batch_issues)
    _finish_snapshot(
        store,
        job_id,
        on_progress,
        extracted_count=len(parse_result.questions),
        message=f"Extracted {len(parse_result.questions)} questions",
    )

    category_hint = None
    if infer_category and parse_result.questions:
        category_hint = parse_result.questions[0].question_text

    if timing_log is not None:
        logger.debug(timing_log.summary())

    return DocumentResult(
        parse_result=parse_result,
        question_pages=question_batch,
        answer_pages=answer_batch,
        category_id=category_id,
        category_hint=category_hint,
    )


def _finish_snapshot(
    store: JobStore,
    job_id: str,
    on_progress: Optional[ProgressCallback],
    **changes: Any,
) -> None:
    snapshot = store.get(job_id)
    if snapshot is None:
        return
    snapshot = replace(snapshot, **changes)
    store.put(job_id, snapshot)
    if on_progress is not None:
        on_progress(snapshot)


def process_question_answer_set(
    question_pdf: bytes,
    answer_pdf: Optional[bytes] = None,
    *,
    recognizer_factory: Optional[RecognizerFactory] = TesseractRecognizer,
    **kwargs: Any,
) -> DocumentResult:
    """
    Extract questions from PDF bytes.

    Opens both documents with PyMuPDF and delegates to process_documents.
    An unreadable answer PDF is reported as an issue and processing
    continues without it.

    Args:
        question_pdf: Question PDF bytes
        answer_pdf: Answer PDF bytes, if any
        recognizer_factory: OCR engine per page (Tesseract by default)
        **kwargs: Passed to process_documents

    Raises:
        SegmentationFailure: If the question PDF is unreadable or yields
            no questions
    """
    try:
        question_pages = PdfPageProvider.from_bytes(question_pdf)
    except CollaboratorFailure as e:
        raise _segmentation_failure(f"Question document could not be opened: {e}", "") from e

    answer_pages = None
    open_issues: List[str] = []
    if answer_pdf is not None:
        try:
            answer_pages = PdfPageProvider.from_bytes(answer_pdf)
        except CollaboratorFailure as e:
            open_issues.append(f"Answer document could not be opened: {e}")
            logger.warning(open_issues[-1])

    try:
        result = process_documents(
            question_pages,
            answer_pages,
            recognizer_factory=recognizer_factory,
            **kwargs,
        )
    finally:
        question_pages.close()
        if answer_pages is not None:
            answer_pages.close()

    if open_issues:
        parse_result = replace(
            result.parse_result, issues=tuple(open_issues) + result.parse_result.issues
        )
        result = replace(result, parse_result=parse_result)
    return result
