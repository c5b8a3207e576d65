"""Document pipeline: clean, OCR, extract, classify, name, deliver.

One document at a time moves through the stage directories:

    in/ or force-processing/ -> cleaned/ -> ocr/ -> out/

A failure at any step stops that document and leaves whatever was produced so
far on disk, so it can be inspected or dropped back into in/.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from rich.markup import escape

from ocrrename import OcrRename
from models import Classifier
from storage import LocalDriver, Stage
from tools import Cleaner, OcrEngine, TextExtractor, TextLayerProbe
from utils.retry import RetryCancelled

from .naming import unique_base_name
from .title_ledger import TitleLedger


class DocumentState(Enum):
    """Where a document got to in the pipeline."""
    INTAKE = "intake"
    CLEANED = "cleaned"
    OCRD = "ocr'd"
    PASS_THROUGH = "pass-through"
    TEXT_EXTRACTED = "text extracted"
    CLASSIFIED = "classified"
    NAMED = "named"
    DELIVERED = "delivered"


@dataclass(frozen=True)
class QueueItem:
    """A document waiting to be processed.

    Attributes:
        filename: Name of the file inside its intake directory
        forced: True for force-processing/ (always re-clean and re-OCR)
    """
    filename: str
    forced: bool = False

    @property
    def stage(self) -> Stage:
        return Stage.intake_for(self.forced)


@dataclass
class DocumentResult:
    """Outcome of processing one document.

    Attributes:
        item: The processed queue item
        state: Last state reached (DELIVERED on success)
        title: Title returned by the classifier
        output_path: Delivered file (success only)
        error: The exception that stopped processing (failure only)
        skipped: The document was not processed at all (gone or empty)
    """
    item: QueueItem
    state: DocumentState = DocumentState.INTAKE
    title: Optional[str] = None
    output_path: Optional[str] = None
    error: Optional[Exception] = None
    skipped: bool = False
    history: list = field(default_factory=list)

    @property
    def delivered(self) -> bool:
        return self.state is DocumentState.DELIVERED

    @property
    def ocr_skipped(self) -> bool:
        return DocumentState.PASS_THROUGH in self.history

    def advance(self, state: DocumentState) -> None:
        self.state = state
        self.history.append(state)


@dataclass
class PipelineContext:
    """Everything process_document needs besides the document."""
    driver: LocalDriver
    cleaner: Cleaner
    probe: TextLayerProbe
    ocr_engine: OcrEngine
    extractor: TextExtractor
    classifier: Classifier
    ledger: TitleLedger


def process_document(item: QueueItem, ctx: PipelineContext) -> DocumentResult:
    """Run one document through the pipeline.

    Never raises for a per-document problem: the error is printed and
    returned in the result. RetryCancelled (shutdown) is re-raised.
    """
    result = DocumentResult(item=item)
    filename = item.filename
    src_stage = item.stage

    if not ctx.driver.file_exists(src_stage, filename):
        OcrRename.print_right(f"Skipping {src_stage.dirname}/{escape(filename)}: file is gone")
        result.skipped = True
        return result

    if os.path.getsize(ctx.driver.path(src_stage, filename)) == 0:
        OcrRename.print_right(f"Skipping empty file: {src_stage.dirname}/{escape(filename)}")
        result.skipped = True
        return result

    mode = "forced" if item.forced else "normal"
    OcrRename.print_right(f"[red]Processing: {src_stage.dirname}/{escape(filename)} ({mode})[/red]")

    try:
        _run_stages(item, ctx, result)
    except RetryCancelled:
        raise
    except Exception as e:
        result.error = e
        OcrRename.print_right(
            f"[red]Error processing {escape(filename)} (after {result.state.value}): {escape(str(e))}[/red]"
        )
        OcrRename.print_right("  Left in place for manual retry")
    return result


def _run_stages(item: QueueItem, ctx: PipelineContext, result: DocumentResult) -> None:
    driver = ctx.driver
    filename = item.filename
    src_stage = item.stage
    cleaned_path = driver.path(Stage.CLEANED, filename)
    ocr_path = driver.path(Stage.OCR, filename)

    # 1. Normalize
    OcrRename.print_right("  Cleaning with Ghostscript...")
    ctx.cleaner.clean(driver.path(src_stage, filename), cleaned_path)
    result.advance(DocumentState.CLEANED)

    # 2. OCR unless a text layer is already there (normal mode only)
    if not item.forced and ctx.probe.has_text(cleaned_path):
        OcrRename.print_right("  Text layer found, skipping OCR")
        driver.move(Stage.CLEANED, filename, Stage.OCR)
        result.advance(DocumentState.PASS_THROUGH)
    else:
        OcrRename.print_right(f"  Running OCR{' (forced)' if item.forced else ''}...")
        ctx.ocr_engine.ocr(cleaned_path, ocr_path, force=item.forced)
        driver.delete(Stage.CLEANED, filename)
        result.advance(DocumentState.OCRD)

    # 3. Extract
    OcrRename.print_right("  Extracting text...")
    text = ctx.extractor.extract(ocr_path)
    result.advance(DocumentState.TEXT_EXTRACTED)

    # 4. Classify (blocks until the API answers)
    OcrRename.print_right(f"  Asking {ctx.classifier.name} for a title...")
    result.title = ctx.classifier.classify(text)
    result.advance(DocumentState.CLASSIFIED)
    OcrRename.print_right(f"  Title: {escape(result.title)}")

    # 5. Name (recorded in the ledger before the file moves)
    base_name = unique_base_name(result.title, ctx.ledger, driver)
    result.advance(DocumentState.NAMED)

    # 6. Deliver, then drop the source
    result.output_path = driver.move(Stage.OCR, filename, Stage.OUT, base_name + ".pdf")
    if driver.file_exists(src_stage, filename):
        driver.delete(src_stage, filename)
    result.advance(DocumentState.DELIVERED)

    OcrRename.print_right(f"[green]✓ Delivered: {Stage.OUT.dirname}/{escape(base_name)}.pdf[/green]")
    _log_delivery(base_name, f"{src_stage.dirname}/{escape(filename)}")


def _log_delivery(base_name: str, source: str) -> None:
    """Log a delivery entry."""
    timestamp = datetime.now().strftime("%H:%M")
    OcrRename.print_left(f"{timestamp} {escape(base_name)}", f"  {source} → {Stage.OUT.dirname}/")
