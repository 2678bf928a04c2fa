"""Pipeline configuration for catalogmedia.

:class:`UploaderConfig` is a dataclass that captures every tuneable knob of
the upload pipeline.  One instance is passed to :class:`MediaUploader` and
shared by the validator, the image normalizer and the upload transport.

Module-level constants define the defaults used by the storefront's admin
back office:

* :data:`DEFAULT_ALLOWED_MIME_PREFIXES` -- media families accepted for upload.
* :data:`DEFAULT_RETRYABLE_STATUSES` -- HTTP statuses treated as transient.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_ALLOWED_MIME_PREFIXES: list[str] = ["image/", "video/"]
"""MIME prefixes accepted by the validator."""

DEFAULT_RETRYABLE_STATUSES: frozenset[int] = frozenset({503, 504, 544})
"""503 and 504, plus 544 which the storage proxy returns on its own timeouts."""

DEFAULT_MAX_FILE_SIZE_BYTES = 20 * 1024 * 1024  # 20 MiB
DEFAULT_TARGET_SIZE_BYTES = 300 * 1024  # 300 KiB
DEFAULT_MAX_DIMENSION = 2048


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class UploaderConfig:
    """Complete configuration for a media upload pipeline.

    Every parameter has a default matching the storefront's uploader, so
    ``UploaderConfig()`` is a working configuration against a local server.

    Parameters
    ----------
    base_url:
        Root URL of the storefront server that exposes the upload endpoint.
    upload_path:
        Path of the multipart upload endpoint relative to ``base_url``.
    upload_field:
        Multipart form field under which the file is sent.
    max_file_size_bytes:
        Files strictly larger than this are rejected.  Default is 20 MiB.
    max_number_of_files:
        Advisory batch size.  Larger batches are logged, not truncated.
    allowed_mime_prefixes:
        A file is accepted when its MIME type starts with one of these.
    max_dimension:
        Longest edge (px) an image is scaled down to before cropping.
    initial_quality:
        JPEG quality factor (0-1] for the first encode pass.
    quality_floor:
        Lowest quality factor the second encode pass may use.
    quality_step:
        Amount subtracted from the quality for the second pass.
    target_size_bytes:
        Encoded-size budget that triggers the second pass when exceeded.
    retry_max_attempts:
        Total upload attempts per file, including the first.
    retry_base_delay:
        Backoff unit in seconds.  The delay after attempt *n* is
        ``retry_base_delay * n``.
    retryable_statuses:
        HTTP statuses treated as transient failures.
    max_concurrent_files:
        Number of files processed at once.  ``1`` keeps batches strictly
        sequential.
    timeout_seconds:
        Per-request HTTP timeout.
    metrics:
        Optional :class:`~catalogmedia.observability.MetricsHook` backend.
    """

    # ── Endpoint ────────────────────────────────────────────────────────
    base_url: str = "http://localhost:5000"

    upload_path: str = "/api/upload"

    upload_field: str = "files"

    # ── Validation ──────────────────────────────────────────────────────
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES

    max_number_of_files: int = 1

    allowed_mime_prefixes: list[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MIME_PREFIXES),
    )

    # ── Image normalization ─────────────────────────────────────────────
    max_dimension: int = DEFAULT_MAX_DIMENSION

    initial_quality: float = 0.85

    quality_floor: float = 0.5

    quality_step: float = 0.1

    target_size_bytes: int = DEFAULT_TARGET_SIZE_BYTES

    # ── Retry ───────────────────────────────────────────────────────────
    retry_max_attempts: int = 3

    retry_base_delay: float = 1.0

    retryable_statuses: frozenset[int] = DEFAULT_RETRYABLE_STATUSES

    # ── Batch ───────────────────────────────────────────────────────────
    max_concurrent_files: int = 1

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 120.0

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.upload_path.startswith("/"):
            raise ValueError(f"upload_path must start with '/', got {self.upload_path!r}")
        if not self.upload_field:
            raise ValueError("upload_field must not be empty")
        if self.max_file_size_bytes <= 0:
            raise ValueError(f"max_file_size_bytes must be > 0, got {self.max_file_size_bytes}")
        if self.max_number_of_files < 1:
            raise ValueError(f"max_number_of_files must be >= 1, got {self.max_number_of_files}")
        if not self.allowed_mime_prefixes:
            raise ValueError("allowed_mime_prefixes must not be empty")
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be >= 1, got {self.max_dimension}")
        if not 0 < self.initial_quality <= 1:
            raise ValueError(f"initial_quality must be in (0, 1], got {self.initial_quality}")
        if not 0 < self.quality_floor <= self.initial_quality:
            raise ValueError(
                f"quality_floor must be in (0, initial_quality], got {self.quality_floor}"
            )
        if self.quality_step < 0:
            raise ValueError(f"quality_step must be >= 0, got {self.quality_step}")
        if self.target_size_bytes <= 0:
            raise ValueError(f"target_size_bytes must be > 0, got {self.target_size_bytes}")
        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.max_concurrent_files < 1:
            raise ValueError(f"max_concurrent_files must be >= 1, got {self.max_concurrent_files}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        self.retryable_statuses = frozenset(self.retryable_statuses)
