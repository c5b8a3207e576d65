"""pdftotext adapters: text layer probe and final text extraction."""

import os
from typing import Sequence

from .base import ExternalTool


def text_path_for(pdf_path: str) -> str:
    """Sibling .txt path for a PDF (invoice.pdf -> invoice.txt)."""
    root, ext = os.path.splitext(pdf_path)
    if ext.lower() != ".pdf":
        root = pdf_path
    return root + ".txt"


def _read_text(path: str) -> str:
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return f.read()


class TextExtractor(ExternalTool):
    """Extracts the plain text used for classification."""

    name = "pdftotext"

    def __init__(self, command: Sequence[str] = ("pdftotext",)) -> None:
        super().__init__(command)

    def extract(self, pdf_path: str) -> str:
        """Return the plain text of pdf_path.

        The sibling .txt file is removed after reading.

        Raises:
            ToolFailure: If pdftotext did not write the .txt file
        """
        txt_path = text_path_for(pdf_path)
        self._run([pdf_path, txt_path], pdf_path)
        self._require(txt_path, pdf_path)
        try:
            return _read_text(txt_path)
        finally:
            os.remove(txt_path)


class TextLayerProbe(ExternalTool):
    """Checks whether a PDF already carries a text layer.

    Only used in normal mode to decide whether OCR can be skipped. The
    extracted text goes to a scratch file that is always deleted; the input
    PDF is never written to.
    """

    name = "pdftotext"

    def __init__(self, command: Sequence[str] = ("pdftotext",)) -> None:
        super().__init__(command)

    def has_text(self, pdf_path: str) -> bool:
        """True if pdftotext finds any non-whitespace text in pdf_path.

        Raises:
            ToolFailure: If pdftotext did not write the scratch file
        """
        scratch_path = os.path.splitext(pdf_path)[0] + ".probe.txt"
        try:
            self._run([pdf_path, scratch_path], pdf_path)
            self._require(scratch_path, pdf_path)
            return bool(_read_text(scratch_path).strip())
        finally:
            if os.path.exists(scratch_path):
                os.remove(scratch_path)
