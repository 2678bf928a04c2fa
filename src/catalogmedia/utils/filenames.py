"""File-name helpers."""

from __future__ import annotations

from pathlib import PurePosixPath


def with_extension(name: str, extension: str) -> str:
    """Return *name* with its extension replaced by *extension*.

    Names without an extension get one appended.  Only the last suffix is
    replaced, so ``"kush.final.png"`` becomes ``"kush.final.jpg"``.

    Parameters
    ----------
    name:
        Original file name (a bare name, not a path).
    extension:
        New extension, with or without the leading dot.
    """
    if not extension.startswith("."):
        extension = f".{extension}"
    stem = PurePosixPath(name).stem if name else ""
    if not stem:
        stem = "image"
    return f"{stem}{extension}"
