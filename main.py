#!/usr/bin/env python3
"""ocr-rename - OCR incoming PDFs and file them under an AI-derived name."""

import argparse
import os
import sys
import threading
import time
from typing import Optional, Sequence

from dotenv import load_dotenv

from ocrrename import OcrRename, __version__
from ocrrename.config import ConfigError, Settings
from models import create_classifier
from storage import LocalDriver, Stage, StorageError
from tools import create_tools
from workflows import (
    IntakeQueue,
    IntakeWatcher,
    LEDGER_FILENAME,
    PipelineContext,
    TitleLedger,
    process_document,
)


def build_context(settings: Settings, workdir: str,
                  stop_event: Optional[threading.Event] = None) -> PipelineContext:
    """Create the stage directories, ledger, tool adapters and classifier.

    Args:
        settings: Runtime settings
        workdir: Working directory holding the stage directories
        stop_event: Interrupts classification retry waits when set
    """
    driver = LocalDriver(workdir)
    cleaner, probe, ocr_engine, extractor = create_tools(settings)
    return PipelineContext(
        driver=driver,
        cleaner=cleaner,
        probe=probe,
        ocr_engine=ocr_engine,
        extractor=extractor,
        classifier=create_classifier(settings, stop_event=stop_event),
        ledger=TitleLedger(os.path.join(driver.root_path, LEDGER_FILENAME)),
    )


def run_once(ctx: PipelineContext) -> None:
    """Process whatever is in the intake directories now, then return."""
    intake = IntakeQueue()
    if not intake.scan(ctx.driver):
        OcrRename.print_right("No PDF files found in intake")
        return
    intake.run_worker(lambda item: process_document(item, ctx), until_empty=True)
    OcrRename.print_right("\n[green]Processing complete![/green]")


def run_watch(ctx: PipelineContext, settings: Settings,
              stop_event: threading.Event) -> None:
    """Process the intake directories, then keep watching until Ctrl+C."""
    intake = IntakeQueue()
    watcher = IntakeWatcher(intake, ctx.driver, settle_delay=settings.settle_delay)
    watcher.start()
    # Watch first so nothing dropped during the scan is missed
    intake.scan(ctx.driver)
    worker = intake.start(lambda item: process_document(item, ctx), stop_event)

    OcrRename.print_right(
        f"Watching {Stage.INTAKE.dirname}/ and {Stage.FORCE_INTAKE.dirname}/ "
        "(press Ctrl+C to stop)"
    )
    try:
        while worker.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        OcrRename.print_right("\nStopping...")
    finally:
        stop_event.set()
        watcher.stop()
        worker.join(timeout=5)
    OcrRename.print_right("[green]✓ Watcher stopped[/green]")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="OCR incoming PDFs and rename them to 'YYYY-MM-DD - Sender - Title'"
    )
    parser.add_argument("--workdir", type=str, default=".",
                        help="Directory holding in/, force-processing/, cleaned/, ocr/ and out/")
    parser.add_argument("--once", action="store_true",
                        help="Process the current intake and exit instead of watching")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    load_dotenv()

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"Error: {e}")
        print("Example: AI_API_URL=https://api.openai.com/v1/chat/completions "
              "AI_API_KEY=sk-... AI_MODEL=gpt-4o-mini")
        return 1

    OcrRename.configure(args)

    stop_event = threading.Event()
    try:
        ctx = build_context(settings, OcrRename.workdir, stop_event)
    except StorageError as e:
        print(f"Error: {e}")
        return 1

    OcrRename.print_right(f"ocr-rename {__version__}")
    OcrRename.print_right(f"Working directory: {ctx.driver.display_name}")
    OcrRename.print_right(f"Model: {settings.model}")

    if OcrRename.once:
        try:
            run_once(ctx)
        except KeyboardInterrupt:
            OcrRename.print_right("\nStopped")
            return 130
    else:
        run_watch(ctx, settings, stop_event)
    return 0


if __name__ == "__main__":
    sys.exit(main())
