"""Upload endpoint access: HTTP transport and retry policy."""

from .retries import compute_backoff, is_retryable
from .transport import AsyncUploadTransport

__all__ = [
    "AsyncUploadTransport",
    "compute_backoff",
    "is_retryable",
]
