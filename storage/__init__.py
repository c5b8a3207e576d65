"""Stage-directory storage for ocr-rename.

Each processing stage owns one directory below the working directory:

    in/                 normal-mode intake
    force-processing/   forced-mode intake (always re-clean and re-OCR)
    cleaned/            Ghostscript output
    ocr/                OCRmyPDF output (or the pass-through cleaned file)
    out/                delivered, renamed documents

Usage:
    from storage import LocalDriver, Stage

    driver = LocalDriver(".")
    driver.move(Stage.OCR, "scan.pdf", Stage.OUT, "2021-03-04 - Stadtwerke - Rechnung.pdf")
"""

from .base import Stage, StorageError, FileInfo
from .local import LocalDriver


__all__ = [
    'Stage',
    'StorageError',
    'FileInfo',
    'LocalDriver',
]
