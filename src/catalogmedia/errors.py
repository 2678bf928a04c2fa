"""Error hierarchy for the catalogmedia upload pipeline.

Every error class inherits from :class:`CatalogMediaError`.  Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

The batch uploader never lets these escape for a single file: validation
errors become rejections, image errors trigger the upload-original fallback,
and upload errors become failed-file entries.  They are raised directly by
the lower-level functions (:func:`validate_file`, :func:`normalize_image`,
:meth:`AsyncUploadTransport.send`) for callers that use those on their own.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the pipeline can raise."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    IMAGE_ERROR = "IMAGE_ERROR"
    IMAGE_DECODE_ERROR = "IMAGE_DECODE_ERROR"
    IMAGE_ENCODE_ERROR = "IMAGE_ENCODE_ERROR"
    UPLOAD_ERROR = "UPLOAD_ERROR"
    UPLOAD_TRANSPORT_ERROR = "UPLOAD_TRANSPORT_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UPLOAD_RESPONSE_ERROR = "UPLOAD_RESPONSE_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class CatalogMediaError(Exception):
    """Base exception for all catalogmedia errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A description of what went wrong, suitable for showing to an admin.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------

class MediaValidationError(CatalogMediaError):
    """Base class for files refused before any processing.

    Context keys: ``name``, plus subclass-specific keys.
    """

    def __init__(
        self,
        code: str = ErrorCode.VALIDATION_ERROR,
        message: str = "File rejected",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code=code, message=message, context=context, cause=cause)


class FileTooLargeError(MediaValidationError):
    """The file's declared size exceeds ``max_file_size_bytes``.

    Context keys: ``name``, ``size_bytes``, ``max_bytes``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.FILE_TOO_LARGE,
            message=message,
            context=context,
            cause=cause,
        )


class FileTypeError(MediaValidationError):
    """The file's MIME type is not in the allowed prefix list.

    Context keys: ``name``, ``mime_type``, ``allowed_prefixes``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INVALID_FILE_TYPE,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Image errors
# ---------------------------------------------------------------------------

class ImageProcessingError(CatalogMediaError):
    """Base class for image normalization failures."""

    def __init__(
        self,
        code: str = ErrorCode.IMAGE_ERROR,
        message: str = "Image processing error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code=code, message=message, context=context, cause=cause)


class ImageDecodeError(ImageProcessingError):
    """The source bytes could not be decoded as an image.

    Context keys: ``name``, ``mime_type``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_DECODE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ImageEncodeError(ImageProcessingError):
    """Re-encoding produced no output or the encoder failed.

    Context keys: ``name``, ``quality``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_ENCODE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Upload errors
# ---------------------------------------------------------------------------

class UploadError(CatalogMediaError):
    """Base class for failures talking to the upload endpoint.

    Exposes ``status_code`` (``None`` when no response was received) so the
    retry classifier does not have to dig through ``context``.
    """

    def __init__(
        self,
        code: str = ErrorCode.UPLOAD_ERROR,
        message: str = "Upload error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code=code, message=message, context=context, cause=cause)

    @property
    def status_code(self) -> int | None:
        return self.context.get("status_code")


class UploadTransportError(UploadError):
    """The endpoint answered with a non-2xx status.

    Context keys: ``name``, ``status_code``, ``body``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UPLOAD_TRANSPORT_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class UploadNetworkError(UploadError):
    """The request never produced a response (timeout, refused, reset).

    Context keys: ``name``, ``url``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NETWORK_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class UploadResponseError(UploadError):
    """A 2xx response did not carry any public URL.

    Context keys: ``name``, ``status_code``, ``body``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UPLOAD_RESPONSE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
