"""
Tests for extractor.labels module.

Label normalization across every choice alphabet, and text cleaning.
"""

import pytest

from quiz_toolkit.extractor.labels import (
    canonical_label,
    clean_text,
    is_choice_label,
    normalize_choice_label,
)

# Same presentation position across every alphabet
ALPHABETS = [
    ["1", "2", "3", "4", "5"],
    ["a", "b", "c", "d", "e"],
    ["A", "B", "C", "D", "E"],
    ["ア", "イ", "ウ", "エ", "オ"],
    ["①", "②", "③", "④", "⑤"],
]


class TestNormalizeChoiceLabel:
    """Tests for normalize_choice_label()."""

    @pytest.mark.parametrize("position", range(5))
    def test_normalize_when_same_position_then_same_index(self, position):
        """Every alphabet maps the Nth label to index N."""
        indices = {normalize_choice_label(alphabet[position]) for alphabet in ALPHABETS}
        assert indices == {position}

    @pytest.mark.parametrize("index", range(5))
    def test_normalize_when_canonical_form_then_round_trips(self, index):
        """Re-normalizing the canonical label returns the same index."""
        assert normalize_choice_label(canonical_label(index)) == index

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("(3)", 2),
            ("（ウ）", 2),
            ("３．", 2),
            ("ｳ", 2),      # half-width katakana
            ("え", 3),      # hiragana
            (" b) ", 1),
            ("Ｅ", 4),
            ("0", 0),
        ],
    )
    def test_normalize_when_decorated_or_full_width_then_recognized(self, raw, expected):
        assert normalize_choice_label(raw) == expected

    @pytest.mark.parametrize("raw", ["", "6", "z", "カ", "?"])
    def test_normalize_when_unrecognized_then_defaults_to_zero(self, raw):
        """Unrecognized labels default to 0 and fail the pre-check."""
        assert normalize_choice_label(raw) == 0
        assert not is_choice_label(raw)

    def test_canonical_label_when_out_of_range_then_raises_error(self):
        with pytest.raises(ValueError):
            canonical_label(5)


class TestCleanText:
    """Tests for clean_text()."""

    def test_clean_text_when_zero_width_chars_then_removed(self):
        assert clean_text("問\u200b1\ufeff") == "問1"

    def test_clean_text_when_nbsp_and_ideographic_space_then_single_space(self):
        assert clean_text("a\u00a0\u3000 b") == "a b"

    def test_clean_text_when_crlf_and_blank_runs_then_one_blank_line(self):
        assert clean_text("line1\r\n\r\n\r\n\r\nline2\rline3") == "line1\n\nline2\nline3"

    def test_clean_text_when_trailing_spaces_then_stripped_per_line(self):
        assert clean_text("  a  \n  b  ") == "a\nb"

    def test_clean_text_when_empty_then_empty(self):
        assert clean_text("") == ""

    def test_clean_text_when_circled_digits_then_preserved(self):
        """Cleaning must not fold circled digits into plain digits."""
        assert clean_text("① A ② B") == "① A ② B"
