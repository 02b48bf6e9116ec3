"""
Tests for extractor.pipeline module.

End-to-end extraction over in-memory pages and PDFs, with the
recognizer replaced by fakes.
"""

import threading

import fitz
import pytest

from quiz_toolkit.core.models import JobStatus
from quiz_toolkit.extractor import (
    ExtractionConfig,
    SegmentationFailure,
    parse_question_text,
    process_documents,
    process_question_answer_set,
)
from quiz_toolkit.extractor.batch import InMemoryJobStore
from quiz_toolkit.extractor.pipeline import analyze_content
from quiz_toolkit.extractor.timing import TimingLog

QUESTION_PAGE_1 = (
    "問1 次のうち、感染症の予防に最も適切なものを1つ選べ。\n"
    "ア. 手洗いを徹底する\n"
    "イ. 換気をしない\n"
    "ウ. 睡眠を減らす\n"
)
QUESTION_PAGE_2 = (
    "問2 血圧の正常値について正しいものはどれか。\n"
    "ア. 収縮期血圧 200 mmHg\n"
    "イ. 収縮期血圧 120 mmHg\n"
)


def _pdf(*pages: str) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


class TestParseQuestionText:
    """Tests for parse_question_text() on already-extracted text."""

    def test_parse_when_single_question_then_five_choices(self):
        # Arrange
        text = "問1. What is X?\n1. A\n2. B\n3. C\n4. D\n5. E\n"

        # Act
        result = parse_question_text(text)

        # Assert
        assert result.question_count == 1
        question = result.questions[0]
        assert question.question_number == 1
        assert question.question_text == "What is X?"
        assert question.choices == ("A", "B", "C", "D", "E")
        assert question.correct_choice_index is None

    def test_parse_when_questions_out_of_order_then_each_keeps_own_choices(self):
        # Arrange
        text = "問2 second question here\n1. A\n2. B\n問1 first question here\n1. C\n2. D\n"

        # Act
        result = parse_question_text(text)

        # Assert
        assert [q.question_number for q in result.questions] == [2, 1]
        assert result.questions[0].choices[:2] == ("A", "B")
        assert result.questions[1].choices[:2] == ("C", "D")
        assert result.questions[1].question_text == "first question here"

    def test_parse_when_source_scores_low_then_quality_issues_reported(self):
        text = "問1. What is X?\n1. A\n2. B\n3. C\n4. D\n5. E\n"

        result = parse_question_text(text)

        assert result.quality_score < 100
        assert any(
            issue.startswith("Quality: Low Japanese character ratio")
            and "language profile" in issue
            for issue in result.issues
        )
        assert any(issue.startswith("Quality: Text is short") for issue in result.issues)

    def test_parse_when_answer_text_given_then_reconciled(self, sample_question_text):
        # Act
        result = parse_question_text(sample_question_text, "問1: 1\n問2: イ")

        # Assert
        assert [q.question_number for q in result.questions] == [1, 2]
        assert [q.correct_choice_index for q in result.questions] == [0, 1]
        assert result.questions[0].question_text == "次のうち、感染症の予防に"
        assert result.questions[1].question_text == "血圧の正常値について"
        assert result.questions[1].choices[3:] == ("—", "—")
        assert result.answered_count == 2
        assert 0 <= result.quality_score <= 100

    def test_parse_when_no_answer_text_then_inline_answers_used(self):
        text = (
            "問1 正しいものを選べ\n1. A\n2. B\n3. C\n答え：2\n"
            "問2 次を選べ\n1. D\n2. E\n答え：1\n"
        )

        result = parse_question_text(text)

        assert [q.correct_choice_index for q in result.questions] == [1, 0]
        assert "2 of 2 questions matched an answer" in result.issues

    def test_parse_when_answer_document_has_no_answers_then_issue(self, sample_question_text):
        result = parse_question_text(sample_question_text, "解答は別紙を参照")

        assert "No answers found in the answer document" in result.issues
        assert result.answered_count == 0

    def test_parse_when_question_without_choices_then_kept_with_issue(self):
        text = "Q1 Describe the water cycle in detail\nQ2 Pick one\na) yes\nb) no"

        result = parse_question_text(text)

        assert result.questions[0].choice_count == 0
        assert "Question 1: no choices found" in result.issues

    def test_parse_when_timing_log_given_then_phases_recorded(self, sample_question_text):
        timing_log = TimingLog()

        parse_question_text(sample_question_text, "1. ア", timing_log=timing_log)

        assert {"segmentation", "answer_parsing"} <= set(timing_log.document_timings)
        assert "q1" in timing_log.question_timings

    def test_parse_when_empty_text_then_segmentation_failure(self):
        with pytest.raises(SegmentationFailure) as exc_info:
            parse_question_text("   \n ")

        assert exc_info.value.text_length == 0

    def test_parse_when_no_blocks_then_failure_carries_diagnostics(self):
        # Act
        with pytest.raises(SegmentationFailure) as exc_info:
            parse_question_text("just a few words")

        # Assert
        failure = exc_info.value
        assert failure.sample == "just a few words"
        assert failure.analysis["has_latin"] is True
        assert failure.analysis["has_japanese"] is False
        assert "manually" in failure.recommendation
        assert failure.to_dict()["text_length"] == len("just a few words")


class TestAnalyzeContent:
    def test_analyze_content_when_japanese_choices_then_flags_set(self):
        analysis = analyze_content("問1 次のうち?\nア 選択肢")

        assert analysis["has_japanese"] is True
        assert analysis["has_question_marks"] is True
        assert analysis["has_choice_markers"] is True
        assert analysis["line_count"] == 2

    def test_analyze_content_when_empty_then_zero_counts(self):
        analysis = analyze_content("")

        assert analysis["line_count"] == 0
        assert analysis["word_count"] == 0


class TestProcessDocuments:
    """Tests for process_documents() over page providers."""

    def test_process_when_question_and_answer_pages_then_reconciled(self, fake_pages):
        # Arrange
        store = InMemoryJobStore()
        questions = fake_pages([QUESTION_PAGE_1, QUESTION_PAGE_2])
        answers = fake_pages(["問1: 1\n問2: 2"])

        # Act
        result = process_documents(questions, answers, store=store, job_id="job_docs")

        # Assert
        parsed = result.parse_result
        assert [q.correct_choice_index for q in parsed.questions] == [0, 1]
        assert len(result.question_pages.pages) == 2
        assert len(result.answer_pages.pages) == 1
        assert store.get("job_docs").status == JobStatus.COMPLETED
        assert store.get("job_docs").extracted_count == 2
        assert store.get("job_docs-answers") is not None

    def test_process_when_category_options_then_passed_through(self, fake_pages):
        result = process_documents(
            fake_pages([QUESTION_PAGE_1]),
            category_id="cat-7",
            infer_category=True,
        )

        assert result.category_id == "cat-7"
        assert result.category_hint == result.parse_result.questions[0].question_text
        assert result.to_dict()["category_id"] == "cat-7"

    def test_process_when_text_layer_short_then_recognizer_used(
        self, fake_pages, recognizer_factory
    ):
        make = recognizer_factory(text=QUESTION_PAGE_1, confidence=0.7)

        result = process_documents(fake_pages(["p. 1"]), recognizer_factory=make)

        assert result.parse_result.question_count == 1
        assert result.question_pages.pages[0].confidence == 0.7
        assert all(r.closed for r in make.created)

    def test_process_when_no_text_anywhere_then_failure_and_error_snapshot(self, fake_pages):
        store = InMemoryJobStore()

        with pytest.raises(SegmentationFailure, match="No usable text"):
            process_documents(fake_pages(["", ""]), store=store, job_id="job_blank")

        assert store.get("job_blank").status == JobStatus.ERROR

    def test_process_when_cancelled_then_empty_result_with_issue(self, fake_pages):
        cancel = threading.Event()
        cancel.set()

        result = process_documents(fake_pages([QUESTION_PAGE_1]), cancel=cancel)

        assert result.parse_result.questions == ()
        assert "Processing was cancelled" in result.parse_result.issues
        assert result.question_pages.status == JobStatus.CANCELLED

    def test_process_when_progress_callback_given_then_final_count_reported(self, fake_pages):
        snapshots = []

        process_documents(
            fake_pages([QUESTION_PAGE_1, QUESTION_PAGE_2]),
            config=ExtractionConfig(),
            on_progress=snapshots.append,
        )

        assert snapshots[0].status == JobStatus.PENDING
        assert snapshots[-1].status == JobStatus.COMPLETED
        assert snapshots[-1].extracted_count == 2


class TestProcessQuestionAnswerSet:
    """Tests for process_question_answer_set() with real PDF bytes."""

    QUESTION = "Question 1: Which planet is the largest?\na) Mars\nb) Jupiter\nc) Venus"

    def test_process_when_text_pdfs_then_questions_and_answers(self):
        result = process_question_answer_set(
            _pdf(self.QUESTION), _pdf("1. b\n2. c\n3. a"), recognizer_factory=None
        )

        question = result.parse_result.questions[0]
        assert question.question_text == "Which planet is the largest?"
        assert question.choices[:3] == ("Mars", "Jupiter", "Venus")
        assert question.correct_choice_index == 1

    def test_process_when_answer_pdf_unreadable_then_issue_and_continue(self):
        result = process_question_answer_set(
            _pdf(self.QUESTION), b"not a pdf", recognizer_factory=None
        )

        assert result.parse_result.question_count == 1
        assert result.parse_result.issues[0].startswith("Answer document could not be opened")
        assert result.answer_pages is None

    def test_process_when_question_pdf_unreadable_then_segmentation_failure(self):
        with pytest.raises(SegmentationFailure, match="could not be opened"):
            process_question_answer_set(b"not a pdf", recognizer_factory=None)
