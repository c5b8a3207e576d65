"""Tests for sanitize_filename and unique_base_name."""

import pytest

from storage import Stage
from workflows import sanitize_filename, unique_base_name, DEFAULT_BASE_NAME, MAX_BASE_NAME_BYTES


ALLOWED_PUNCTUATION = set(" _-")

SAMPLES = [
    "2020-01-15 - Agentur für Arbeit - Arbeitsuchendmeldung",
    "2021-03-04 - Stadtwerke - Rechnung",
    "0000-00-00 - Unknown - Brief/Letter: v2.0",
    "Straße & Söhne (GmbH) <draft> \"final\"",
    "../../etc/passwd",
    "tab\there\nnewline",
    "東京電力 - 請求書 ٣",
    "emoji 📄 title",
    "",
    "___",
]


def _is_safe(name):
    return all(ch.isalnum() or ch in ALLOWED_PUNCTUATION for ch in name)


class TestSanitizeFilename:
    """Tests for sanitize_filename()."""

    @pytest.mark.parametrize("raw", SAMPLES)
    def test_only_safe_characters(self, raw):
        assert _is_safe(sanitize_filename(raw))

    @pytest.mark.parametrize("raw", SAMPLES)
    def test_idempotent(self, raw):
        once = sanitize_filename(raw)
        assert sanitize_filename(once) == once

    @pytest.mark.parametrize("raw", SAMPLES)
    def test_preserves_length(self, raw):
        assert len(sanitize_filename(raw)) == len(raw)

    def test_canonical_title_unchanged(self):
        title = "2020-01-15 - Agentur für Arbeit - Arbeitsuchendmeldung"
        assert sanitize_filename(title) == title

    def test_replaces_with_underscore(self):
        assert sanitize_filename("a/b:c.d") == "a_b_c_d"

    def test_keeps_letters_and_digits_of_any_script(self):
        assert sanitize_filename("Ärger über Öl ß") == "Ärger über Öl ß"
        assert sanitize_filename("東京 ٣") == "東京 ٣"

    def test_path_separators_cannot_escape(self):
        assert "/" not in sanitize_filename("../../etc/passwd")
        assert "." not in sanitize_filename("../../etc/passwd")


class TestUniqueBaseName:
    """Tests for unique_base_name()."""

    def test_first_use_keeps_title(self, ledger, driver):
        assert unique_base_name("2021-03-04 - Stadtwerke - Rechnung", ledger, driver) == \
            "2021-03-04 - Stadtwerke - Rechnung"

    def test_appends_to_ledger(self, ledger, driver):
        name = unique_base_name("Title", ledger, driver)
        assert ledger.titles() == [name]

    def test_suffixes_in_assignment_order(self, ledger, driver):
        names = [unique_base_name("T", ledger, driver) for _ in range(4)]
        assert names == ["T", "T_1", "T_2", "T_3"]
        assert ledger.titles() == names

    def test_avoids_existing_output_file(self, ledger, driver):
        open(driver.path(Stage.OUT, "T.pdf"), "w").close()
        assert unique_base_name("T", ledger, driver) == "T_1"

    def test_avoids_names_from_previous_runs(self, ledger, driver):
        ledger.append("T")
        ledger.append("T_1")
        assert unique_base_name("T", ledger, driver) == "T_2"

    def test_sanitizes_before_lookup(self, ledger, driver):
        ledger.append("A_B")
        assert unique_base_name("A/B", ledger, driver) == "A_B_1"

    def test_empty_title_uses_default(self, ledger, driver):
        assert unique_base_name("", ledger, driver) == DEFAULT_BASE_NAME
        assert unique_base_name("   ", ledger, driver) == f"{DEFAULT_BASE_NAME}_1"

    def test_long_title_is_cut(self, ledger, driver):
        name = unique_base_name("2021-03-04 - " + "x" * 400, ledger, driver)
        assert len(name.encode("utf-8")) == MAX_BASE_NAME_BYTES
        assert name.startswith("2021-03-04 - xxx")

    def test_long_title_not_split_mid_character(self, ledger, driver):
        # 'ü' is two bytes in UTF-8, so 200 bytes end on a boundary after 100
        name = unique_base_name("ü" * 150 + "a", ledger, driver)
        assert name == "ü" * (MAX_BASE_NAME_BYTES // 2)

        odd = unique_base_name("a" + "ü" * 150, ledger, driver)
        assert odd == "a" + "ü" * ((MAX_BASE_NAME_BYTES - 1) // 2)

    def test_long_title_suffixes_stay_under_limit(self, ledger, driver):
        title = "Ä" * 300
        names = [unique_base_name(title, ledger, driver) for _ in range(3)]
        assert names[1] == names[0] + "_1"
        assert all(len((n + ".pdf").encode("utf-8")) <= 255 for n in names)
