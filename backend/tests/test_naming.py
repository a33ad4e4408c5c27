"""Tests for output naming and base-name sanitizing."""

import pytest

from backend.imagepad.naming import generate_file_name, normalize_file_name, suggest_base_name


class TestGenerateFileName:
    def test_rename_keeps_trailing_number(self):
        assert generate_file_name("photo42.png", 0, True, "cat") == "cat-42.jpg"

    def test_rename_without_number_uses_position(self):
        assert generate_file_name("photo.png", 4, True, "cat") == "cat-5.jpg"

    def test_no_rename_keeps_numbered_stem(self):
        assert generate_file_name("img-7.png", 3, False, "") == "img-7.jpg"

    def test_no_rename_inserts_hyphen_before_number(self):
        assert generate_file_name("photo42.png", 0, False, "") == "photo-42.jpg"

    def test_no_rename_without_number_appends_position(self):
        assert generate_file_name("beach.jpeg", 1, False, "") == "beach-2.jpg"

    def test_rename_with_empty_base_falls_back(self):
        assert generate_file_name("img-7.png", 3, True, "") == "img-7.jpg"

    def test_digits_only_stem(self):
        assert generate_file_name("42.png", 0, False, "") == "42.jpg"

    def test_only_last_extension_removed(self):
        assert generate_file_name("archive.tar.gz", 0, False, "") == "archive.tar-1.jpg"

    def test_name_without_extension(self):
        assert generate_file_name("scan", 2, False, "") == "scan-3.jpg"

    def test_custom_extension(self):
        assert generate_file_name("photo42.png", 0, True, "cat", ".png") == "cat-42.png"

    def test_digits_inside_stem_ignored(self):
        assert generate_file_name("v2-final.png", 0, True, "cat") == "cat-1.jpg"


class TestNormalizeFileName:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Red Sofa", "red-sofa"),
            ("  many   spaces  ", "-many-spaces-"),
            ("Żółta łódź", "zolta-lodz"),
            ("Café Crème", "cafe-creme"),
            ("Straße", "strasse"),
            ("a_b!c@d", "abcd"),
            ("x - y", "x-y"),
            ("v1.2", "v1.2"),
            ("", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_file_name(raw) == expected

    @pytest.mark.parametrize("raw", ["Żółta łódź", "a - _ - b", "ŁÓDŹ  2024!!", "--x--"])
    def test_idempotent(self, raw):
        once = normalize_file_name(raw)
        assert normalize_file_name(once) == once

    @pytest.mark.parametrize("raw", ["Żółta łódź ĄĘ", "naïve façade", "#$%^&*()"])
    def test_output_alphabet(self, raw):
        result = normalize_file_name(raw)
        assert all(ch in "abcdefghijklmnopqrstuvwxyz0123456789.-" for ch in result)
        assert "--" not in result


class TestSuggestBaseName:
    def test_uses_text_before_first_dot(self):
        assert suggest_base_name("Red Sofa.final.png") == "red-sofa"

    def test_diacritics_folded(self):
        assert suggest_base_name("Krzesło Dębowe.jpg") == "krzeslo-debowe"
