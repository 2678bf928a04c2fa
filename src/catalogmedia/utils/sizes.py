"""Human-readable byte sizes for notices and log lines."""

from __future__ import annotations

_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size_bytes: int) -> str:
    """Format *size_bytes* with base-1024 units and at most one decimal.

    >>> format_file_size(0)
    '0 Bytes'
    >>> format_file_size(1536)
    '1.5 KB'
    >>> format_file_size(20 * 1024 * 1024)
    '20 MB'
    """
    if size_bytes <= 0:
        return "0 Bytes"

    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_UNITS) - 1:
        value /= 1024
        unit += 1

    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text} {_UNITS[unit]}"
