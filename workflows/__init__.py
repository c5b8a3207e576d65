"""Workflow layer for ocr-rename.

Contains the document processing logic:
- Naming: Filename sanitizing and collision-free base names
- Title ledger: Persistent record of every delivered base name
- Pipeline: Clean, OCR, extract, classify, name and deliver one document
- Intake: Startup scan, folder watcher and the single-worker queue
"""

from .naming import sanitize_filename, unique_base_name, DEFAULT_BASE_NAME, MAX_BASE_NAME_BYTES
from .title_ledger import TitleLedger, LedgerCorruption, LEDGER_FILENAME
from .pipeline import (
    DocumentResult,
    DocumentState,
    PipelineContext,
    QueueItem,
    process_document,
)
from .intake import IntakeQueue, IntakeWatcher


__all__ = [
    # Naming
    'sanitize_filename',
    'unique_base_name',
    'DEFAULT_BASE_NAME',
    'MAX_BASE_NAME_BYTES',

    # Title ledger
    'TitleLedger',
    'LedgerCorruption',
    'LEDGER_FILENAME',

    # Pipeline
    'DocumentResult',
    'DocumentState',
    'PipelineContext',
    'QueueItem',
    'process_document',

    # Intake
    'IntakeQueue',
    'IntakeWatcher',
]
