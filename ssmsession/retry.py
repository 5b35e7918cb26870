"""Back-off retry strategies for reconnecting a session's data channel."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional, TypeVar, Union

_T = TypeVar("_T")

_log = logging.getLogger(__name__)

_SLEEP_FACTOR = 2
_GET_MESSAGES_TIMEOUT_DELAY = timedelta(milliseconds=100)


def retry(attempts: int, sleep: Union[float, timedelta], fn: Callable[[], _T]) -> Optional[_T]:
    """Call ``fn`` up to ``attempts`` times, doubling the pause after each failure.

    ``sleep`` is the first pause, in seconds or as a timedelta. Returns what
    ``fn`` returned on its first success; re-raises the last failure once
    every attempt has failed. With no attempts, ``fn`` is never called.
    """
    delay = sleep.total_seconds() if isinstance(sleep, timedelta) else float(sleep)
    _log.info("Retrying connection to channel")
    last_error: Optional[Exception] = None
    while attempts > 0:
        attempts -= 1
        try:
            return fn()
        except Exception as exc:
            last_error = exc
            time.sleep(delay)
            delay *= _SLEEP_FACTOR
            _log.debug("%d attempts to connect web socket connection.", attempts)
    if last_error is not None:
        raise last_error
    return None


@dataclass
class RepeatableExponentialRetryer:
    """Retries a call with exponential delays that restart once they grow too long."""

    callable_func: Callable[[], Any]
    geometric_ratio: float
    initial_delay_in_milli: int
    max_delay_in_milli: int
    max_attempts: int

    def next_sleep_time(self, attempt: int) -> timedelta:
        """The pause before retrying after the given attempt number."""
        millis = int(self.initial_delay_in_milli * self.geometric_ratio ** attempt)
        return timedelta(milliseconds=millis)

    def call(self) -> Any:
        """Call the function, retrying on failure; re-raise after ``max_attempts`` retries."""
        attempt = 0
        failed_so_far = 0
        while True:
            try:
                return self.callable_func()
            except Exception:
                if failed_so_far == self.max_attempts:
                    raise
            pause = self.next_sleep_time(attempt)
            if pause // timedelta(milliseconds=1) > self.max_delay_in_milli:
                attempt = 0
                pause = self.next_sleep_time(attempt)
            time.sleep(pause.total_seconds())
            attempt += 1
            failed_so_far += 1


def sdk_retry_delay(operation_name: str, error: Any, retry_count: int) -> timedelta:
    """Delay before retrying a service request.

    A client timeout while polling for messages is retried quickly; anything
    else waits at least a second, doubling with each retry, with jitter.
    """
    if (
        operation_name == "GetMessages"
        and error is not None
        and "Client.Timeout" in str(error)
    ):
        return _GET_MESSAGES_TIMEOUT_DELAY
    millis = int(2 ** retry_count) * (random.randrange(500) + 1000)
    return timedelta(milliseconds=millis)