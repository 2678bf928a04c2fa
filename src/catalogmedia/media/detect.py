"""MIME type detection for files read from disk.

Browsers hand the uploader a declared MIME type; files picked up from a
directory do not have one, so it is sniffed from the leading bytes and the
extension is only used as a fallback.
"""

from __future__ import annotations

import mimetypes

# Map of magic bytes to MIME types for sniffing.
_MAGIC_BYTES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"RIFF", "image/webp"),  # RIFF....WEBP / RIFF....AVI (checked below)
    (b"BM", "image/bmp"),
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    (b"%PDF", "application/pdf"),
]

# ISO base media (MP4 / QuickTime) brands found at offset 8 after ``ftyp``.
_FTYP_BRANDS: dict[bytes, str] = {
    b"qt  ": "video/quicktime",
    b"M4V ": "video/x-m4v",
    b"3gp4": "video/3gpp",
    b"3gp5": "video/3gpp",
    b"avif": "image/avif",
    b"heic": "image/heic",
}

_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/avif": ".avif",
    "image/heic": ".heic",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
    "video/x-msvideo": ".avi",
}


def sniff_mime(data: bytes) -> str | None:
    """Detect a MIME type from the first bytes of *data*, or ``None``."""
    if len(data) >= 12 and data[4:8] == b"ftyp":
        return _FTYP_BRANDS.get(data[8:12], "video/mp4")

    for magic, mime in _MAGIC_BYTES:
        if data[:len(magic)] == magic:
            if magic == b"RIFF":
                if len(data) < 12:
                    continue
                if data[8:12] == b"WEBP":
                    return "image/webp"
                if data[8:12] == b"AVI ":
                    return "video/x-msvideo"
                continue
            return mime
    return None


def detect_mime_type(name: str, data: bytes) -> str:
    """Return the MIME type for a file, sniffing *data* before *name*.

    Falls back to ``application/octet-stream`` so the validator can reject
    the file with a type error rather than crash.
    """
    mime_type = sniff_mime(data) if data else None
    if not mime_type:
        mime_type, _ = mimetypes.guess_type(name)
    return mime_type or "application/octet-stream"


def mime_to_extension(mime_type: str) -> str:
    """Map a MIME type to a file extension (``.bin`` when unknown)."""
    return _EXTENSIONS.get(mime_type, ".bin")
