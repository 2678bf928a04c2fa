"""Media handling stages that run before upload.

Exports
-------
validate_file / check_file
    Size ceiling and MIME-prefix allowlist.
normalize_image / async_normalize_image
    Square crop, downscale and JPEG re-encode for images.
compute_square_geometry
    The scale-and-crop arithmetic used by the normalizer.
detect_mime_type / sniff_mime / mime_to_extension
    MIME detection for files read from disk.
"""

from .detect import detect_mime_type, mime_to_extension, sniff_mime
from .normalize import (
    SquareGeometry,
    async_normalize_image,
    compute_square_geometry,
    normalize_image,
)
from .validate import check_file, validate_file

__all__ = [
    "SquareGeometry",
    "async_normalize_image",
    "check_file",
    "compute_square_geometry",
    "detect_mime_type",
    "mime_to_extension",
    "normalize_image",
    "sniff_mime",
    "validate_file",
]
