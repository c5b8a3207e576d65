"""Intake: startup scan, folder watching and the single-worker queue.

Producers (the startup scan, watchdog callbacks, settle timers) only ever put
items on the queue. One worker takes them off in FIFO order and runs the
pipeline, so no two documents are ever processed at the same time and the
ledger and output directory have a single writer.
"""

import os
import queue
import threading
from typing import Callable, Dict, List, Optional, Tuple

from rich.markup import escape
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ocrrename import OcrRename
from storage import LocalDriver, Stage
from utils.retry import RetryCancelled

from .pipeline import QueueItem

PDF_EXTENSION = ".pdf"

# Seconds the worker blocks on an empty queue before checking for shutdown
POLL_INTERVAL = 0.5


class IntakeQueue:
    """FIFO of QueueItems drained by exactly one worker."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[QueueItem]" = queue.Queue()
        self._pending = set()
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None

    def put(self, item: QueueItem) -> bool:
        """Enqueue an item unless the same item is already waiting.

        Returns:
            True if the item was added
        """
        with self._lock:
            if item in self._pending:
                return False
            self._pending.add(item)
        self._queue.put(item)
        return True

    def scan(self, driver: LocalDriver) -> List[QueueItem]:
        """Enqueue every PDF already sitting in the intake directories.

        Normal intake first, then forced intake, each sorted by name.
        """
        added = []
        for stage in (Stage.INTAKE, Stage.FORCE_INTAKE):
            for info in driver.list_files(stage, extension=PDF_EXTENSION):
                item = QueueItem(info.name, forced=stage is Stage.FORCE_INTAKE)
                if self.put(item):
                    added.append(item)
        if added:
            OcrRename.print_right(f"Found {len(added)} PDF files in intake")
        return added

    def __len__(self) -> int:
        return self._queue.qsize()

    def _take(self, block: bool) -> QueueItem:
        item = self._queue.get(block=block, timeout=POLL_INTERVAL if block else None)
        with self._lock:
            self._pending.discard(item)
        return item

    def run_worker(self, process: Callable[[QueueItem], object],
                   stop_event: Optional[threading.Event] = None,
                   until_empty: bool = False) -> None:
        """Process items one at a time until stopped.

        Args:
            process: Called with each item. Exceptions are printed, never
                     propagated, so one bad document cannot stop the queue.
            stop_event: Ends the loop when set
            until_empty: Return as soon as the queue is empty
        """
        while stop_event is None or not stop_event.is_set():
            try:
                item = self._take(block=not until_empty)
            except queue.Empty:
                if until_empty:
                    return
                continue
            try:
                process(item)
            except RetryCancelled:
                OcrRename.print_right(f"Stopped while processing {escape(item.filename)}")
                return
            except Exception as e:
                OcrRename.print_right(f"[red]Error processing {escape(item.filename)}: {escape(str(e))}[/red]")
            finally:
                self._queue.task_done()

    def start(self, process: Callable[[QueueItem], object],
              stop_event: threading.Event) -> threading.Thread:
        """Run the worker loop in a background thread."""
        self._worker = threading.Thread(
            target=self.run_worker,
            args=(process, stop_event),
            name="intake-worker",
            daemon=True,
        )
        self._worker.start()
        return self._worker

    def join(self) -> None:
        """Block until every queued item has been processed."""
        self._queue.join()


class IntakeWatcher(FileSystemEventHandler):
    """Watches the intake directories and queues new PDFs once they settle.

    A created or moved-in PDF is only queued after settle_delay seconds, and
    only if it still exists then. Scanners and sync clients often create a
    file and replace it right away; a newer event for the same path restarts
    its timer.
    """

    def __init__(self, intake: IntakeQueue, driver: LocalDriver,
                 settle_delay: float = 10.0,
                 timer_factory: Callable[..., threading.Timer] = threading.Timer) -> None:
        super().__init__()
        self.intake = intake
        self.driver = driver
        self.settle_delay = settle_delay
        self._timer_factory = timer_factory
        self._timers: Dict[str, Tuple[threading.Timer, object]] = {}
        self._lock = threading.Lock()
        self._observer: Optional[Observer] = None
        self._stage_dirs = {
            os.path.normcase(driver.stage_path(Stage.INTAKE)): Stage.INTAKE,
            os.path.normcase(driver.stage_path(Stage.FORCE_INTAKE)): Stage.FORCE_INTAKE,
        }

    def on_created(self, event) -> None:
        if not event.is_directory:
            self.schedule(os.fsdecode(event.src_path))

    def on_moved(self, event) -> None:
        if not event.is_directory:
            self.schedule(os.fsdecode(event.dest_path))

    def _stage_for(self, path: str) -> Optional[Stage]:
        return self._stage_dirs.get(os.path.normcase(os.path.dirname(os.path.abspath(path))))

    def schedule(self, path: str) -> None:
        """Start (or restart) the settle timer for path."""
        if not path.lower().endswith(PDF_EXTENSION):
            return
        if self._stage_for(path) is None:
            return

        token = object()
        timer = self._timer_factory(self.settle_delay, self._settled, args=(path, token))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(path, None)
            if previous is not None:
                previous[0].cancel()
            self._timers[path] = (timer, token)
        timer.start()

    def _settled(self, path: str, token: object) -> None:
        with self._lock:
            current = self._timers.get(path)
            if current is None or current[1] is not token:
                # Superseded by a newer event for the same path
                return
            del self._timers[path]
        if not os.path.isfile(path):
            return

        stage = self._stage_for(path)
        item = QueueItem(os.path.basename(path), forced=stage is Stage.FORCE_INTAKE)
        if self.intake.put(item):
            OcrRename.print_right(f"Queued {stage.dirname}/{escape(item.filename)}")

    def pending(self) -> List[str]:
        """Paths still waiting for their settle timer."""
        with self._lock:
            return list(self._timers)

    def start(self) -> None:
        """Start watching both intake directories."""
        self._observer = Observer()
        for stage in (Stage.INTAKE, Stage.FORCE_INTAKE):
            self._observer.schedule(self, self.driver.stage_path(stage), recursive=False)
        self._observer.start()

    def stop(self) -> None:
        """Stop watching and drop all pending timers."""
        with self._lock:
            timers = [timer for timer, _ in self._timers.values()]
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
