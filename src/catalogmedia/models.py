"""Data models for the catalogmedia upload pipeline.

Every value that flows between the pipeline stages lives here.  All types
are plain dataclasses; the per-file values are frozen because each stage
produces a new value for the next one instead of mutating its input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class MediaKind(str, Enum):
    """Media family derived from a MIME type."""

    IMAGE = "image"
    VIDEO = "video"
    OTHER = "other"

    @classmethod
    def from_mime(cls, mime_type: str) -> MediaKind:
        mime = mime_type.lower()
        if mime.startswith("image/"):
            return cls.IMAGE
        if mime.startswith("video/"):
            return cls.VIDEO
        return cls.OTHER


class AttemptOutcome(str, Enum):
    """Result of one network transfer try."""

    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    TERMINAL_FAILURE = "terminal_failure"


class NoticeKind(str, Enum):
    """Per-file progress events reported while a batch runs."""

    REJECTED = "rejected"
    """The validator refused the file (too large or wrong type)."""

    OPTIMIZING = "optimizing"
    """Image normalization started."""

    OPTIMIZED = "optimized"
    """Image normalization finished; context carries the sizes."""

    OPTIMIZATION_FAILED = "optimization_failed"
    """Normalization failed; the original file is uploaded instead."""

    RETRYING = "retrying"
    """A transient upload failure; another attempt follows."""

    FAILED = "failed"
    """The upload failed for good."""

    COMPLETED = "completed"
    """The batch finished with at least one uploaded file."""


# ---------------------------------------------------------------------------
# Pipeline values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PendingFile:
    """A user-selected file waiting to go through the pipeline.

    Attributes
    ----------
    name:
        File name as selected (e.g. ``"gelato-41.png"``).
    mime_type:
        Declared MIME type (e.g. ``"image/png"``).
    data:
        Raw file bytes.
    size_bytes:
        Declared size.  Defaults to ``len(data)``; the validator only looks
        at this value.
    """

    name: str
    mime_type: str
    data: bytes = field(repr=False)
    size_bytes: int = -1

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            object.__setattr__(self, "size_bytes", len(self.data))

    @property
    def kind(self) -> MediaKind:
        return MediaKind.from_mime(self.mime_type)

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> PendingFile:
        """Read *path* into a :class:`PendingFile`.

        When *mime_type* is not given it is sniffed from the file's leading
        bytes, falling back to the extension.
        """
        from catalogmedia.media.detect import detect_mime_type

        file_path = Path(path)
        data = file_path.read_bytes()
        if mime_type is None:
            mime_type = detect_mime_type(file_path.name, data)
        return cls(name=file_path.name, mime_type=mime_type, data=data)


@dataclass(frozen=True)
class NormalizedPayload:
    """A square JPEG produced by the image normalizer.

    Attributes
    ----------
    name:
        Output file name: the original stem with a ``.jpg`` extension.
    data:
        Encoded JPEG bytes.
    width, height:
        Output dimensions in pixels.  Always equal.
    original_size:
        Size of the source file in bytes.
    quality:
        Quality factor of the encode pass that was kept.
    encode_passes:
        ``1`` or ``2``.
    """

    name: str
    data: bytes = field(repr=False)
    width: int
    height: int
    original_size: int
    quality: float
    encode_passes: int = 1
    mime_type: str = "image/jpeg"

    @property
    def encoded_size(self) -> int:
        return len(self.data)

    @property
    def dimensions(self) -> str:
        return f"{self.width}x{self.height}px"

    @property
    def savings_percent(self) -> int:
        """Percentage saved relative to the original (negative if larger)."""
        if self.original_size <= 0:
            return 0
        return round((self.original_size - self.encoded_size) / self.original_size * 100)


@dataclass(frozen=True)
class UploadPayload:
    """The bytes the transfer orchestrator sends for one file.

    ``source_name`` is the name the user selected; ``name`` is the name sent
    to the endpoint (they differ when an image was re-encoded).
    """

    name: str
    data: bytes = field(repr=False)
    content_type: str
    source_name: str

    @classmethod
    def from_pending(cls, file: PendingFile) -> UploadPayload:
        return cls(
            name=file.name,
            data=file.data,
            content_type=file.mime_type,
            source_name=file.name,
        )

    @classmethod
    def from_normalized(cls, payload: NormalizedPayload, source_name: str) -> UploadPayload:
        return cls(
            name=payload.name,
            data=payload.data,
            content_type=payload.mime_type,
            source_name=source_name,
        )


@dataclass(frozen=True)
class UploadAttempt:
    """One network transfer try inside a retry loop."""

    attempt_number: int
    outcome: AttemptOutcome
    result_url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class TransferOutcome:
    """Everything one file's retry loop produced.

    Attributes
    ----------
    name:
        The user-selected file name.
    attempts:
        Each try in order.  At most ``retry_max_attempts`` entries.
    """

    name: str
    attempts: tuple[UploadAttempt, ...]

    @property
    def succeeded(self) -> bool:
        return bool(self.attempts) and self.attempts[-1].outcome == AttemptOutcome.SUCCESS

    @property
    def url(self) -> str | None:
        return self.attempts[-1].result_url if self.succeeded else None

    @property
    def error(self) -> str | None:
        return None if self.succeeded or not self.attempts else self.attempts[-1].error


# ---------------------------------------------------------------------------
# Batch results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rejection:
    """A file refused by the validator; it is never normalized or uploaded."""

    name: str
    reason: str
    code: str


@dataclass(frozen=True)
class FailedFile:
    """A file that passed validation but could not be uploaded."""

    name: str
    reason: str
    attempts: int = 0


@dataclass(frozen=True)
class UploadedFile:
    """A file uploaded successfully."""

    name: str
    url: str
    attempts: int = 1


@dataclass
class UploadResult:
    """Outcome of one batch.

    Attributes
    ----------
    succeeded_urls:
        Public URLs in completion order (not input order).
    failed_files:
        Files that passed validation but failed to upload.
    rejected:
        Files refused by the validator.
    uploaded:
        Per-file details for each URL in ``succeeded_urls``.
    """

    succeeded_urls: list[str] = field(default_factory=list)
    failed_files: list[FailedFile] = field(default_factory=list)
    rejected: list[Rejection] = field(default_factory=list)
    uploaded: list[UploadedFile] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.succeeded_urls)

    @property
    def all_failed(self) -> bool:
        """``True`` when nothing was uploaded."""
        return not self.succeeded_urls


@dataclass(frozen=True)
class Notice:
    """A per-file event for the caller's UI (toast, log line, progress bar).

    Attributes
    ----------
    kind:
        What happened.
    file_name:
        The user-selected file name, or ``""`` for batch-level notices.
    message:
        Human-readable description.
    context:
        Structured details (sizes, attempt numbers, error codes).
    """

    kind: NoticeKind
    file_name: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)
