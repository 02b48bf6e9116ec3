"""
Tests for extractor.detection.segmenter module.
"""

import pytest

from quiz_toolkit.extractor.config import ExtractionConfig
from quiz_toolkit.extractor.detection.segmenter import segment, split_paragraphs


class TestSegment:
    """Tests for segment() strategy selection."""

    def test_segment_when_marker_numbering_then_one_block_per_question(self):
        # Arrange
        text = "問1 最初の問題です。\nア. A\nイ. B\n問2 二番目の問題です。\nア. C\nイ. D\n"

        # Act
        blocks = segment(text)

        # Assert
        assert [b.number for b in blocks] == [1, 2]
        assert all(b.pattern == "marker" for b in blocks)
        assert blocks[0].text.startswith("問1")
        assert "問2" not in blocks[0].text
        assert blocks[1].text.endswith("イ. D")

    def test_segment_when_later_pattern_matches_more_then_later_selected(self):
        """Markers only appear mid-line; numbered lines match five times."""
        # Arrange
        text = (
            "この試験は問1 と 問2 の出題範囲から作成されています\n\n"
            "1. The first question asks about something long enough\n"
            "2. The second question asks about something long enough\n"
            "3. The third question asks about something long enough\n"
            "4. The fourth question asks about something long enough\n"
            "5. The fifth question asks about something long enough\n"
        )

        # Act
        blocks = segment(text)

        # Assert
        assert len(blocks) == 5
        assert [b.number for b in blocks] == [1, 2, 3, 4, 5]
        assert {b.pattern for b in blocks} == {"numbered_line"}

    def test_segment_when_numbered_lines_are_short_then_treated_as_choices(self):
        """Short "1. A" lines are choices, not questions."""
        text = "Question 1: What is X?\n1. A\n2. B\n3. C\n"

        blocks = segment(text)

        assert len(blocks) == 1
        assert blocks[0].pattern == "marker"
        assert "3. C" in blocks[0].text

    def test_segment_when_dai_mon_numbering_then_detected(self):
        text = "第1問 東京の人口について答えよ。\n第2問 大阪の人口について答えよ。"

        blocks = segment(text)

        assert [b.number for b in blocks] == [1, 2]
        assert blocks[0].pattern == "dai_mon"

    def test_segment_when_marker_mid_line_then_not_a_question_start(self):
        """A reference to another question inside a line does not split it."""
        text = "Q1 first question text\nQ2 second, see Q1 again\nQ3 third question text"

        blocks = segment(text)

        assert [b.number for b in blocks] == [1, 2, 3]
        assert "see Q1 again" in blocks[1].text

    def test_segment_when_numbering_restarts_then_every_question_kept(self):
        """Two sections each numbered from 1."""
        # Arrange
        text = (
            "問1 第一部の最初の問題です。\n"
            "問2 第一部の二番目の問題です。\n"
            "問1 第二部の最初の問題です。\n"
            "問2 第二部の二番目の問題です。\n"
        )

        # Act
        blocks = segment(text)

        # Assert
        assert [b.number for b in blocks] == [1, 2, 1, 2]
        assert blocks[2].text.startswith("問1 第二部")

    def test_segment_when_numbers_out_of_order_then_kept_in_text_order(self):
        text = "Q2 printed first question text\nQ1 printed second question text"

        blocks = segment(text)

        assert [b.number for b in blocks] == [2, 1]
        assert blocks[0].start_offset < blocks[1].start_offset

    def test_segment_when_number_above_limit_then_ignored(self):
        config = ExtractionConfig(max_question_number=10)
        text = "Q1 first question text\nQ250 not a question\nQ2 second question"

        blocks = segment(text, config)

        assert [b.number for b in blocks] == [1, 2]
        assert "Q250" in blocks[0].text

    def test_segment_when_no_numbering_then_paragraph_fallback(self):
        """Two long paragraphs with no numbering yield exactly two blocks."""
        # Arrange
        text = (
            "This paragraph describes the first scenario in enough detail to be kept.\n"
            "\n"
            "This paragraph describes the second scenario in enough detail to be kept."
        )

        # Act
        blocks = segment(text)

        # Assert
        assert len(blocks) == 2
        assert all(b.number is None and b.pattern == "paragraph" for b in blocks)
        assert blocks[1].start_offset > blocks[0].start_offset

    def test_segment_when_paragraphs_short_then_dropped(self):
        text = "Header\n\nThis paragraph is comfortably longer than fifty characters in total.\n\nPage"

        blocks = segment(text)

        assert len(blocks) == 1

    @pytest.mark.parametrize("text", ["", "   \n\n  ", "short"])
    def test_segment_when_nothing_usable_then_empty(self, text):
        assert segment(text) == []

    def test_segment_when_offsets_then_point_into_cleaned_text(self):
        text = "intro\nQ1 first question\nQ2 second question"

        blocks = segment(text)

        assert text[blocks[1].start_offset:].startswith("Q2")


class TestSplitParagraphs:
    def test_split_paragraphs_when_blank_line_has_spaces_then_still_splits(self):
        text = "a" * 60 + "\n   \n" + "b" * 60

        blocks = split_paragraphs(text, 50)

        assert [b.text[0] for b in blocks] == ["a", "b"]
