"""Tests for name normalization."""

import pytest

from utils.normalization import normalize_name, strip_diacritics


class TestStripDiacritics:
    def test_removes_accents(self):
        assert strip_diacritics("Tévez") == "Tevez"

    def test_removes_cedilla_and_tilde(self):
        assert strip_diacritics("Conceição") == "Conceicao"

    def test_plain_text_unchanged(self):
        assert strip_diacritics("Gil") == "Gil"


class TestNormalizeName:
    def test_accent_and_case(self):
        assert normalize_name("Tévez") == "tevez"

    def test_multiple_words(self):
        assert normalize_name("Júlio César") == "julio cesar"

    def test_removes_hyphen(self):
        assert normalize_name("Ji-Paraná") == "jiparana"

    def test_removes_periods_commas_apostrophes(self):
        assert normalize_name("D'Alessandro, Jr.") == "dalessandro jr"

    def test_collapses_whitespace(self):
        assert normalize_name("  Carlos    Alberto  ") == "carlos alberto"

    def test_tabs_and_newlines_collapse(self):
        assert normalize_name("Carlos\t\nAlberto") == "carlos alberto"

    def test_empty_string(self):
        assert normalize_name("") == ""

    def test_none(self):
        assert normalize_name(None) == ""

    def test_whitespace_only(self):
        assert normalize_name("   ") == ""

    def test_punctuation_only(self):
        assert normalize_name(".,-'") == ""

    def test_other_punctuation_kept(self):
        assert normalize_name("Gil!") == "gil!"

    def test_dotted_capital_i(self):
        # "İ".lower() yields "i" plus a combining dot
        assert normalize_name("İlhan") == "ilhan"

    @pytest.mark.parametrize(
        "text",
        ["Tévez", "  Fábio   Costa ", "Ji-Paraná", "İlhan", "Bobô.", "", "a - b", "ÅÄÖ", "Ñ'-,."],
    )
    def test_idempotent(self, text):
        once = normalize_name(text)
        assert normalize_name(once) == once
