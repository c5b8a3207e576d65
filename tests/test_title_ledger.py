"""Tests for TitleLedger."""

import json
import os

import pytest

from workflows import TitleLedger, LedgerCorruption


@pytest.fixture
def ledger_path(temp_dir):
    return os.path.join(temp_dir, "titles.json")


class TestInitialization:

    def test_creates_empty_ledger(self, ledger_path):
        TitleLedger(ledger_path)
        with open(ledger_path) as f:
            assert json.load(f) == []

    def test_keeps_existing_entries(self, ledger_path):
        with open(ledger_path, "w") as f:
            json.dump(["A", "B"], f)
        assert TitleLedger(ledger_path).titles() == ["A", "B"]


class TestCorruption:
    """An unreadable ledger counts as empty."""

    @pytest.mark.parametrize("content", ["not json", "{\"a\": 1}", "[1, 2]", ""])
    def test_reads_as_empty(self, ledger_path, content):
        with open(ledger_path, "w") as f:
            f.write(content)
        ledger = TitleLedger(ledger_path)
        assert ledger.titles() == []
        assert ledger.exists("A") is False

    def test_load_raises_internally(self, ledger_path):
        with open(ledger_path, "w") as f:
            f.write("[")
        with pytest.raises(LedgerCorruption):
            TitleLedger(ledger_path)._load()

    def test_append_repairs(self, ledger_path):
        with open(ledger_path, "w") as f:
            f.write("garbage")
        ledger = TitleLedger(ledger_path)
        ledger.append("A")
        with open(ledger_path) as f:
            assert json.load(f) == ["A"]

    def test_deleted_file_reads_as_empty(self, ledger_path):
        ledger = TitleLedger(ledger_path)
        os.remove(ledger_path)
        assert ledger.titles() == []


class TestAppend:

    def test_exists_after_append(self, ledger_path):
        ledger = TitleLedger(ledger_path)
        assert ledger.exists("A") is False
        ledger.append("A")
        assert ledger.exists("A") is True

    def test_preserves_order(self, ledger_path):
        ledger = TitleLedger(ledger_path)
        for name in ("C", "A", "B"):
            ledger.append(name)
        assert ledger.titles() == ["C", "A", "B"]

    def test_pretty_printed_and_unicode(self, ledger_path):
        ledger = TitleLedger(ledger_path)
        ledger.append("Agentur für Arbeit")
        with open(ledger_path, encoding="utf-8") as f:
            content = f.read()
        assert "für" in content
        assert "\n  \"Agentur" in content

    def test_no_temp_files_left(self, ledger_path, temp_dir):
        ledger = TitleLedger(ledger_path)
        ledger.append("A")
        assert os.listdir(temp_dir) == ["titles.json"]


class TestSharedLedger:
    """Two instances on one file see each other's writes."""

    def test_rereads_on_every_check(self, ledger_path):
        first = TitleLedger(ledger_path)
        second = TitleLedger(ledger_path)
        first.append("A")
        assert second.exists("A") is True
        second.append("B")
        assert first.titles() == ["A", "B"]

    def test_sees_external_edits(self, ledger_path):
        ledger = TitleLedger(ledger_path)
        with open(ledger_path, "w") as f:
            json.dump(["Written elsewhere"], f)
        assert ledger.exists("Written elsewhere") is True
