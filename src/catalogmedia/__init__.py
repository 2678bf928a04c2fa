"""catalogmedia: product media upload pipeline for the catalog back office.

Validates selected images and videos, normalizes images into square web
JPEGs, uploads each file to the storefront's upload endpoint with retry,
and reports the public URLs.

Public re-exports
-----------------

* **Uploader:** :class:`MediaUploader`
* **Configuration:** :class:`UploaderConfig`
* **Errors:** Every :class:`CatalogMediaError` subclass and :class:`ErrorCode`
* **Models:** All pipeline value types and enums

Usage::

    from catalogmedia import MediaUploader, PendingFile

    async with MediaUploader() as uploader:
        result = await uploader.upload_batch([PendingFile.from_path("kush.png")])
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from catalogmedia.config import (
    DEFAULT_ALLOWED_MIME_PREFIXES,
    DEFAULT_RETRYABLE_STATUSES,
    UploaderConfig,
)

# ── Errors ──────────────────────────────────────────────────────────────
from catalogmedia.errors import (
    CatalogMediaError,
    ErrorCode,
    FileTooLargeError,
    FileTypeError,
    ImageDecodeError,
    ImageEncodeError,
    ImageProcessingError,
    MediaValidationError,
    UploadError,
    UploadNetworkError,
    UploadResponseError,
    UploadTransportError,
)

# ── Models ──────────────────────────────────────────────────────────────
from catalogmedia.models import (
    AttemptOutcome,
    FailedFile,
    MediaKind,
    NormalizedPayload,
    Notice,
    NoticeKind,
    PendingFile,
    Rejection,
    TransferOutcome,
    UploadAttempt,
    UploadedFile,
    UploadPayload,
    UploadResult,
)

# ── Uploader ────────────────────────────────────────────────────────────
from catalogmedia.uploader import MediaUploader

__all__ = [
    # Uploader
    "MediaUploader",
    # Configuration
    "UploaderConfig",
    "DEFAULT_ALLOWED_MIME_PREFIXES",
    "DEFAULT_RETRYABLE_STATUSES",
    # Errors
    "CatalogMediaError",
    "ErrorCode",
    "MediaValidationError",
    "FileTooLargeError",
    "FileTypeError",
    "ImageProcessingError",
    "ImageDecodeError",
    "ImageEncodeError",
    "UploadError",
    "UploadTransportError",
    "UploadNetworkError",
    "UploadResponseError",
    # Models
    "PendingFile",
    "NormalizedPayload",
    "UploadPayload",
    "UploadAttempt",
    "TransferOutcome",
    "UploadResult",
    "UploadedFile",
    "FailedFile",
    "Rejection",
    "Notice",
    # Enums
    "MediaKind",
    "AttemptOutcome",
    "NoticeKind",
]
