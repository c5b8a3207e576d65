"""Backoff wrapper around a classification backend."""

import threading
from typing import Callable, Optional

from rich.markup import escape

from ocrrename import OcrRename
from utils.retry import retry_with_backoff

from .base import Classifier, ClassificationFailure


def _is_retryable(exc: Exception) -> bool:
    return isinstance(exc, ClassificationFailure)


def _log_retry(exc: Exception, attempt: int, delay: float) -> None:
    """Log when a retry is about to happen."""
    OcrRename.print_right(
        f"[yellow]  [Retry] {escape(str(exc))} on attempt {attempt}, retrying in {delay:.1f}s...[/yellow]"
    )


class RetryingClassifier(Classifier):
    """Retries ClassificationFailure with exponential backoff.

    Defaults reproduce the long-standing behaviour: wait before every first
    attempt, double on each failure, no ceiling, no attempt limit.
    """

    def __init__(
        self,
        classifier: Classifier,
        base_delay: float = 30.0,
        max_delay: Optional[float] = None,
        max_attempts: Optional[int] = None,
        wait_first: bool = True,
        stop_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.classifier = classifier
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.max_attempts = max_attempts
        self.wait_first = wait_first
        self.stop_event = stop_event
        self.sleep = sleep

    @property
    def name(self) -> str:
        return self.classifier.name

    def classify(self, text: str) -> str:
        """Classify text, retrying until the backend answers.

        Raises:
            RetryCancelled: If the stop event is set during a wait
            ClassificationFailure: Only when max_attempts is set and exhausted
        """
        max_retries = None if self.max_attempts is None else max(self.max_attempts - 1, 0)
        return retry_with_backoff(
            lambda: self.classifier.classify(text),
            is_retryable=_is_retryable,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            max_retries=max_retries,
            wait_first=self.wait_first,
            on_retry=_log_retry,
            stop_event=self.stop_event,
            sleep=self.sleep,
        )
