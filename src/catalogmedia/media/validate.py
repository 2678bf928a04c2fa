"""File validation: size ceiling and MIME-prefix allowlist.

Runs before any decoding or network work.  Only the file's declared
metadata is inspected, so validation is a pure function of the
:class:`PendingFile` and the :class:`UploaderConfig`.
"""

from __future__ import annotations

from catalogmedia.config import UploaderConfig
from catalogmedia.errors import FileTooLargeError, FileTypeError, MediaValidationError
from catalogmedia.models import PendingFile, Rejection
from catalogmedia.utils.sizes import format_file_size


def validate_file(file: PendingFile, config: UploaderConfig) -> None:
    """Validate a file's declared size and MIME type.

    The size is checked first, then the type.  A file of exactly
    ``config.max_file_size_bytes`` bytes is accepted.

    Parameters
    ----------
    file:
        The file selected by the caller.
    config:
        Pipeline configuration with the size limit and MIME prefixes.

    Raises
    ------
    FileTooLargeError
        If ``file.size_bytes`` exceeds ``config.max_file_size_bytes``.
    FileTypeError
        If ``file.mime_type`` starts with none of the allowed prefixes.
    """
    if file.size_bytes > config.max_file_size_bytes:
        raise FileTooLargeError(
            message=(
                f"{file.name} exceeds the "
                f"{format_file_size(config.max_file_size_bytes)} limit"
            ),
            context={
                "name": file.name,
                "size_bytes": file.size_bytes,
                "max_bytes": config.max_file_size_bytes,
            },
        )

    mime_type = file.mime_type.lower()
    if not any(mime_type.startswith(prefix) for prefix in config.allowed_mime_prefixes):
        raise FileTypeError(
            message=f"{file.name} must be an image or video file",
            context={
                "name": file.name,
                "mime_type": file.mime_type,
                "allowed_prefixes": list(config.allowed_mime_prefixes),
            },
        )


def check_file(file: PendingFile, config: UploaderConfig) -> Rejection | None:
    """Non-raising variant of :func:`validate_file`.

    Returns a :class:`Rejection` describing why the file was refused, or
    ``None`` when it is accepted.
    """
    try:
        validate_file(file, config)
    except MediaValidationError as exc:
        return Rejection(name=file.name, reason=exc.message, code=exc.code)
    return None
