"""
Retry utilities with exponential backoff for rate-limited APIs.

This module provides a loop for retrying calls that fail because a remote
service is busy, rate limiting us, or briefly unreachable.

WHY WAIT BEFORE THE FIRST ATTEMPT?
----------------------------------
The classification backend is rate limited per minute. Documents usually
arrive in bursts (a scanner dumps a whole stack into the inbox), so firing
requests back to back would trip the limit on every second document.
Waiting the base delay before every call, including the first one, keeps us
under the limit at the cost of latency, which nobody notices for a mailbox.

EXPONENTIAL BACKOFF:
--------------------
After each failure the delay doubles:
  - before attempt 1 → wait base_delay (only with wait_first)
  - attempt 1 fails → wait base_delay * 2
  - attempt 2 fails → wait base_delay * 4
  - ... and so on

UNBOUNDED BY DEFAULT:
---------------------
Both the delay ceiling (max_delay) and the number of attempts (max_retries)
are optional. Left unset, the loop keeps retrying until the call succeeds,
which stalls the caller on a permanently broken endpoint. Set either one to
trade that for an error. A stop_event lets the owner of the loop interrupt a
wait at shutdown.

USAGE:
------
    from utils.retry import retry_with_backoff

    title = retry_with_backoff(
        lambda: classifier.classify(text),
        is_retryable=lambda exc: isinstance(exc, ClassificationFailure),
        base_delay=30.0,
        wait_first=True,
    )
"""

import threading
import time
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


class RetryCancelled(Exception):
    """Raised when a retry wait is interrupted by the stop event."""
    pass


def next_delay(delay: float, max_delay: Optional[float] = None) -> float:
    """Double a delay, honouring the optional ceiling."""
    delay *= 2
    if max_delay is not None:
        delay = min(delay, max_delay)
    return delay


def retry_with_backoff(
    func: Callable[[], T],
    is_retryable: Callable[[Exception], bool],
    base_delay: float = 30.0,
    max_delay: Optional[float] = None,
    max_retries: Optional[int] = None,
    wait_first: bool = False,
    on_retry: Optional[Callable[[Exception, int, float], None]] = None,
    stop_event: Optional[threading.Event] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """
    Call func until it succeeds, waiting exponentially longer after failures.

    Args:
        func: Zero-argument callable to invoke.

        is_retryable: Takes the raised exception and returns True if it
                      should be retried. Anything else propagates at once.

        base_delay: First delay in seconds. Doubles after every failure.

        max_delay: Ceiling for the delay in seconds. None means uncapped.

        max_retries: Number of retries after the initial attempt. None means
                     retry forever.

        wait_first: Wait base_delay before the very first attempt too.

        on_retry: Called before each retry wait with the exception, the
                  attempt number that failed (1-indexed) and the delay.

        stop_event: When set during a wait, the wait ends early and
                    RetryCancelled is raised.

        sleep: Replacement for the wait itself (tests pass a recorder).

    Returns:
        Whatever func returns.

    Raises:
        RetryCancelled: If stop_event is set while waiting.
        The last exception if max_retries is exhausted, or any exception
        that is_retryable rejects.
    """

    def wait(delay: float) -> None:
        if sleep is not None:
            sleep(delay)
        elif stop_event is not None:
            stop_event.wait(delay)
        else:
            time.sleep(delay)
        if stop_event is not None and stop_event.is_set():
            raise RetryCancelled(f"Retry cancelled after waiting {delay:.1f}s")

    delay = base_delay
    if max_delay is not None:
        delay = min(delay, max_delay)

    if wait_first:
        wait(delay)

    attempt = 0
    while True:
        attempt += 1
        try:
            return func()
        except Exception as exc:
            if not is_retryable(exc):
                raise
            if max_retries is not None and attempt > max_retries:
                raise

            # Without wait_first the first failure waits base_delay itself
            if wait_first or attempt > 1:
                delay = next_delay(delay, max_delay)

            if on_retry:
                on_retry(exc, attempt, delay)
            wait(delay)
