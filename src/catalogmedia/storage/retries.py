"""Retry decision logic and linear backoff computation.

Two pure functions used by the transfer orchestrator:

* :func:`is_retryable` -- decide whether a failed upload is transient.
* :func:`compute_backoff` -- the delay before the next attempt.
"""

from __future__ import annotations

import httpx

from catalogmedia.config import DEFAULT_RETRYABLE_STATUSES
from catalogmedia.errors import UploadError, UploadNetworkError

# Substrings of an error message that mark a transient failure.
_RETRYABLE_MARKERS: tuple[str, ...] = ("timeout", "timed out", "network", "connection")

# Network-level exceptions that warrant a retry even with an unhelpful message.
_RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    UploadNetworkError,
    httpx.TimeoutException,
    httpx.NetworkError,
)


def _status_of(exception: Exception) -> int | None:
    if isinstance(exception, UploadError):
        return exception.status_code
    status = getattr(exception, "status_code", None) or getattr(exception, "status", None)
    return status if isinstance(status, int) else None


def is_retryable(
    exception: Exception,
    retryable_statuses: frozenset[int] = DEFAULT_RETRYABLE_STATUSES,
) -> bool:
    """Decide whether an upload failure is worth another attempt.

    A failure is retryable when its message mentions a timeout, the network
    or the connection, or when it carries one of *retryable_statuses*.
    Everything else is terminal.

    Parameters
    ----------
    exception:
        The error raised by the upload attempt.
    retryable_statuses:
        HTTP status codes treated as transient.

    Returns
    -------
    bool
        ``True`` if the upload should be retried (attempts permitting).
    """
    if isinstance(exception, _RETRYABLE_EXCEPTIONS):
        return True

    status = _status_of(exception)
    if status is not None and status in retryable_statuses:
        return True

    message = str(exception).lower()
    return any(marker in message for marker in _RETRYABLE_MARKERS)


def compute_backoff(attempt_number: int, base: float = 1.0) -> float:
    """Delay in seconds to wait after failed attempt *attempt_number*.

    Backoff is linear: ``base * attempt_number``.  Attempts are 1-based, so
    the waits between three attempts are ``base`` and ``2 * base``.
    """
    if attempt_number < 1:
        return 0.0
    return base * attempt_number
