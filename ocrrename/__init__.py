"""ocr-rename - Application state and console output."""

import threading
from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    import argparse

__version__ = "0.2.0"


class OcrRename:
    """Central configuration and state for ocr-rename."""

    # CLI config options
    workdir: str = "."
    once: bool = False

    _console: Console = Console(highlight=False)
    _lock = threading.Lock()

    @classmethod
    def configure(cls, args: "argparse.Namespace") -> None:
        """Initialize configuration from parsed CLI args."""
        cls.workdir = getattr(args, 'workdir', '.')
        cls.once = getattr(args, 'once', False)

    @classmethod
    def set_console(cls, console: Console) -> None:
        """Replace the console (tests capture output this way)."""
        cls._console = console

    @classmethod
    def print_left(cls, line1: str, line2: str) -> None:
        """Print a delivery log entry."""
        with cls._lock:
            cls._console.print(line1)
            cls._console.print(line2)

    @classmethod
    def print_right(cls, message: str) -> None:
        """Print a stage or debug line. Rich markup is rendered."""
        with cls._lock:
            cls._console.print(message)
