"""Ghostscript PDF normalization."""

from typing import Sequence

from .base import ExternalTool


class Cleaner(ExternalTool):
    """Rewrites a PDF through Ghostscript's pdfwrite device.

    Normalizes broken scanner output (odd compression, damaged xref tables)
    so OCRmyPDF and pdftotext see a well-formed file.
    """

    name = "ghostscript"

    PDF_SETTINGS = "/prepress"
    COMPATIBILITY_LEVEL = "1.4"

    def __init__(self, command: Sequence[str] = ("gs",)) -> None:
        super().__init__(command)

    def arguments(self, input_path: str, output_path: str) -> list:
        return [
            "-sDEVICE=pdfwrite",
            f"-dCompatibilityLevel={self.COMPATIBILITY_LEVEL}",
            f"-dPDFSETTINGS={self.PDF_SETTINGS}",
            "-dNOPAUSE",
            "-dQUIET",
            "-dBATCH",
            f"-sOutputFile={output_path}",
            input_path,
        ]

    def clean(self, input_path: str, output_path: str) -> str:
        """Write a normalized copy of input_path to output_path.

        Returns:
            output_path

        Raises:
            ToolFailure: If output_path was not created
        """
        self._run(self.arguments(input_path, output_path), input_path)
        return self._require(output_path, input_path)
