"""OCRmyPDF adapter."""

from typing import Sequence

from .base import ExternalTool


class OcrEngine(ExternalTool):
    """Produces a searchable PDF/A from an input PDF."""

    name = "ocrmypdf"

    def __init__(self, command: Sequence[str] = ("ocrmypdf",),
                 rotate_threshold: float = 14.0) -> None:
        super().__init__(command)
        self.rotate_threshold = rotate_threshold

    def arguments(self, input_path: str, output_path: str, force: bool = False) -> list:
        # --optimize 0: the image optimizer crashes on some scanner output
        args = [
            "--optimize", "0",
            "--output-type", "pdfa",
            "--rotate-pages",
            "--rotate-pages-threshold", f"{self.rotate_threshold:g}",
        ]
        if force:
            args.append("--force-ocr")
        args += [input_path, output_path]
        return args

    def ocr(self, input_path: str, output_path: str, force: bool = False) -> str:
        """OCR input_path into output_path.

        Args:
            input_path: PDF to OCR
            output_path: Where the searchable PDF is written
            force: Rasterize and OCR pages even if they already carry text

        Raises:
            ToolFailure: If output_path was not created
        """
        self._run(self.arguments(input_path, output_path, force), input_path)
        return self._require(output_path, input_path)
