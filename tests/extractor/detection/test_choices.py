"""
Tests for extractor.detection.choices module.
"""

import pytest

from quiz_toolkit.core.models import RawBlock
from quiz_toolkit.extractor.config import ExtractionConfig
from quiz_toolkit.extractor.detection.choices import (
    extract_choices,
    find_inline_answer,
    strip_boilerplate,
    strip_question_marker,
)


def _block(text: str, number=1) -> RawBlock:
    return RawBlock(text=text, start_offset=0, number=number, pattern="marker")


class TestExtractChoices:
    """Tests for extract_choices() alphabet selection and padding."""

    def test_extract_when_five_digit_choices_then_all_extracted(self):
        # Arrange
        block = _block("問1. What is X?\n1. A\n2. B\n3. C\n4. D\n5. E\n")

        # Act
        result = extract_choices(block)

        # Assert
        assert result.question_text == "What is X?"
        assert result.choices == ("A", "B", "C", "D", "E")
        assert result.choice_count == 5
        assert result.alphabet == "digits"

    @pytest.mark.parametrize("count", [1, 3, 5])
    def test_extract_when_any_choice_count_then_exactly_five(self, count):
        """Choices are always padded to five, never truncated."""
        labels = "abcde"[:count]
        text = "Pick one.\n" + "\n".join(f"{label}) option {label}" for label in labels)

        result = extract_choices(_block(text))

        assert len(result.choices) == 5

    def test_extract_when_three_choices_then_padded_with_placeholder(self):
        text = "Which is a colour?\na) red\nb) fish\nc) rock"

        result = extract_choices(_block(text))

        assert result.choices == ("red", "fish", "rock", "—", "—")
        assert result.choice_count == 3
        assert result.alphabet == "latin"

    def test_extract_when_single_choice_then_not_accepted(self):
        """One labelled option is not a multiple-choice question."""
        text = "Explain the following.\n(1) the only item"

        result = extract_choices(_block(text))

        assert result.choice_count == 0
        assert result.alphabet is None
        assert result.choices == ("—",) * 5
        assert "the only item" in result.question_text

    def test_extract_when_custom_placeholder_then_used_for_padding(self):
        config = ExtractionConfig(placeholder_choice="N/A")

        result = extract_choices(_block("Choose.\n① yes\n② no"), config)

        assert result.choices == ("yes", "no", "N/A", "N/A", "N/A")
        assert result.alphabet == "circled"

    def test_extract_when_kana_labels_then_boilerplate_stripped(self):
        # Arrange
        text = (
            "問3 血圧について正しいものはどれか。\n"
            "ア. 収縮期 120\n"
            "イ. 拡張期 200\n"
            "ウ. 脈拍 300\n"
        )

        # Act
        result = extract_choices(_block(text, number=3))

        # Assert
        assert result.alphabet == "kana"
        assert result.choices[:3] == ("収縮期 120", "拡張期 200", "脈拍 300")
        assert result.question_text == "血圧について"

    def test_extract_when_labels_out_of_order_then_only_ordered_run_kept(self):
        """A "3." before "2." is text, not a choice."""
        text = "Which?\n1. one\n3. three\n2. two"

        result = extract_choices(_block(text))

        assert result.choice_count == 2
        assert result.choices[0] == "one 3. three"
        assert result.choices[1] == "two"

    def test_extract_when_digit_and_latin_compete_then_more_choices_win(self):
        """Latin letters yield four choices; the digit run only one."""
        text = "Select 1. item below\na. alpha\nb. beta\nc. gamma\nd. delta"

        result = extract_choices(_block(text, number=None))

        assert result.alphabet == "latin"
        assert result.choice_count == 4

    def test_extract_when_last_choice_followed_by_blank_line_then_stops_there(self):
        text = "Which?\n(1) one\n(2) two\n\nNote: trailing remark"

        result = extract_choices(_block(text))

        assert result.choices[1] == "two"
        assert "trailing remark" in result.question_text

    def test_extract_when_decimal_numbers_then_not_labels(self):
        """The "1." of "1.5" is not a choice label."""
        text = "Which value?\n1. 1.5 mg\n2. 2.5 mg"

        result = extract_choices(_block(text))

        assert result.choices[:2] == ("1.5 mg", "2.5 mg")

    def test_extract_when_inline_answer_then_reported_and_removed(self):
        text = "問1 正しいものを選べ\n1. A\n2. B\n3. C\n答え：2"

        result = extract_choices(_block(text))

        assert result.inline_answer == 1
        assert "答え" not in result.question_text
        assert result.choices[2] == "C"


class TestTextHelpers:
    """Tests for marker, boilerplate and inline answer helpers."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("問1. What", "What"),
            ("問題12 What", "What"),
            ("Question 3: What", "What"),
            ("第2問 What", "What"),
            ("12) What", "What"),
            ("100 patients", "100 patients"),
        ],
    )
    def test_strip_question_marker_when_leading_marker_then_removed(self, text, expected):
        assert strip_question_marker(text) == expected

    def test_strip_boilerplate_when_trailing_phrase_then_removed(self):
        text = "What is X? Choose the most appropriate answer."
        assert strip_boilerplate(text) == "What is X?"

    def test_strip_boilerplate_when_only_boilerplate_then_unchanged(self):
        text = "Which of the following is correct?"
        assert strip_boilerplate(text) == text

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("本文\n答え：3", 2),
            ("本文\n正解は イ", 1),
            ("text\nAnswer: b", 1),
            ("本文\n解答: ④", 3),
        ],
    )
    def test_find_inline_answer_when_marker_present_then_index(self, text, expected):
        remaining, answer = find_inline_answer(text)

        assert answer == expected
        assert remaining in ("本文", "text")

    def test_find_inline_answer_when_absent_then_none(self):
        text = "正しい答えを選べ"
        assert find_inline_answer(text) == (text, None)
