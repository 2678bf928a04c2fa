from .filenames import with_extension
from .sizes import format_file_size

__all__ = [
    "format_file_size",
    "with_extension",
]
