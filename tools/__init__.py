"""External tool adapters for ocr-rename.

Thin wrappers around the command-line tools the pipeline shells out to:
- Cleaner: Ghostscript PDF normalization
- OcrEngine: OCRmyPDF
- TextLayerProbe / TextExtractor: pdftotext (poppler-utils)

Usage:
    from tools import create_tools

    cleaner, probe, ocr_engine, extractor = create_tools(settings)
"""

from .base import ExternalTool, ToolFailure
from .ghostscript import Cleaner
from .ocrmypdf import OcrEngine
from .pdftotext import TextExtractor, TextLayerProbe, text_path_for


def create_tools(settings) -> tuple:
    """Create the four adapters from Settings.

    Returns:
        Tuple of (Cleaner, TextLayerProbe, OcrEngine, TextExtractor)
    """
    return (
        Cleaner(settings.gs_command),
        TextLayerProbe(settings.pdftotext_command),
        OcrEngine(settings.ocrmypdf_command, settings.rotate_threshold),
        TextExtractor(settings.pdftotext_command),
    )


__all__ = [
    'ExternalTool',
    'ToolFailure',
    'Cleaner',
    'OcrEngine',
    'TextExtractor',
    'TextLayerProbe',
    'text_path_for',
    'create_tools',
]
