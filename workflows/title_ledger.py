"""Title ledger: every base name ever delivered to the output directory.

Stored as a pretty-printed JSON array of strings (titles.json). The file is
re-read on every lookup, so a second process sharing the ledger sees names
chosen since we last looked.
"""

import json
import os
import tempfile
from typing import List

from rich.markup import escape

from ocrrename import OcrRename

LEDGER_FILENAME = "titles.json"


class LedgerCorruption(Exception):
    """The ledger file exists but is not a JSON array of strings."""
    pass


class TitleLedger:
    """Persistent, append-only list of assigned base names.

    Not transactional with the file move that follows an append: a crash in
    between leaves a name with no file, and the next document simply gets the
    next suffix.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        if not os.path.exists(path):
            self._write([])

    def _load(self) -> List[str]:
        """Read the ledger from disk.

        Raises:
            LedgerCorruption: If the content is not a JSON array of strings
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (ValueError, UnicodeDecodeError) as e:
            raise LedgerCorruption(f"{self.path}: {e}") from e

        if not isinstance(data, list) or not all(isinstance(t, str) for t in data):
            raise LedgerCorruption(f"{self.path}: expected a JSON array of strings")
        return data

    def titles(self) -> List[str]:
        """All recorded names, oldest first. A corrupt ledger reads as empty."""
        try:
            return self._load()
        except LedgerCorruption as e:
            OcrRename.print_right(f"[yellow]⚠ Ignoring unreadable title ledger ({escape(str(e))})[/yellow]")
            return []

    def exists(self, name: str) -> bool:
        return name in self.titles()

    def append(self, name: str) -> None:
        """Record a name. Written through a temp file and an atomic rename."""
        titles = self.titles()
        titles.append(name)
        self._write(titles)

    def _write(self, titles: List[str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, temp_path = tempfile.mkstemp(prefix='.titles-', suffix='.json', dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(titles, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, self.path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
