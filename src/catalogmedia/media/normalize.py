"""Image normalization: square crop, downscale, and JPEG re-encode.

Product photos arrive in every size and aspect ratio.  Before upload each
image is turned into a square JPEG whose side is at most
``config.max_dimension`` pixels:

1. Decode the source (EXIF orientation applied, flattened to RGB).
2. Scale both edges down proportionally when the longer edge exceeds
   ``max_dimension``.
3. Center-crop the scaled image to a square whose side is the shorter
   scaled edge.
4. Encode at ``initial_quality``.  When the result is larger than
   ``target_size_bytes`` and the quality is still above ``quality_floor``,
   encode exactly once more at ``max(quality_floor, quality - quality_step)``
   and keep that result even if it is still over the target.

Videos never reach this module.
"""

from __future__ import annotations

import asyncio
import io
import time
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from catalogmedia.config import UploaderConfig
from catalogmedia.errors import ImageDecodeError, ImageEncodeError
from catalogmedia.models import NormalizedPayload, PendingFile
from catalogmedia.observability import get_logger
from catalogmedia.utils.filenames import with_extension

log = get_logger("catalogmedia.normalize")

OUTPUT_FORMAT = "JPEG"
OUTPUT_EXTENSION = ".jpg"


@dataclass(frozen=True)
class SquareGeometry:
    """Where to scale and crop an image.

    Attributes
    ----------
    scaled_width, scaled_height:
        Dimensions after the scale-to-fit step.
    side:
        Side of the output square, ``min(scaled_width, scaled_height)``.
    box:
        ``(left, top, right, bottom)`` crop box in scaled coordinates.
    """

    scaled_width: int
    scaled_height: int
    side: int
    box: tuple[int, int, int, int]


def compute_square_geometry(width: int, height: int, max_edge: int) -> SquareGeometry:
    """Compute the scale-to-fit and centered square crop for an image.

    Scaling only happens when ``max(width, height) > max_edge``; the longer
    edge then becomes exactly *max_edge*.  The crop removes the same amount
    from both ends of the longer axis (the extra pixel goes to the far end
    when the difference is odd).
    """
    if width < 1 or height < 1:
        raise ValueError(f"image dimensions must be positive, got {width}x{height}")

    scaled_w, scaled_h = width, height
    longer = max(width, height)
    if longer > max_edge:
        ratio = max_edge / longer
        if width >= height:
            scaled_w = max_edge
            scaled_h = max(1, round(height * ratio))
        else:
            scaled_h = max_edge
            scaled_w = max(1, round(width * ratio))

    side = min(scaled_w, scaled_h)
    left = (scaled_w - side) // 2
    top = (scaled_h - side) // 2
    return SquareGeometry(
        scaled_width=scaled_w,
        scaled_height=scaled_h,
        side=side,
        box=(left, top, left + side, top + side),
    )


def _decode(file: PendingFile) -> Image.Image:
    """Decode *file* into an RGB Pillow image with orientation applied."""
    try:
        image = Image.open(io.BytesIO(file.data))
        image.load()
    except (
        UnidentifiedImageError,
        OSError,
        ValueError,
        SyntaxError,
        EOFError,
        Image.DecompressionBombError,
    ) as exc:
        raise ImageDecodeError(
            message=f"Failed to load image {file.name}",
            context={"name": file.name, "mime_type": file.mime_type},
            cause=exc,
        ) from exc

    image = ImageOps.exif_transpose(image)

    if image.mode == "RGB":
        return image

    # Flatten transparency onto white; JPEG has no alpha channel.
    if image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    ):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    return image.convert("RGB")


def _to_pillow_quality(quality: float) -> int:
    return max(1, min(95, round(quality * 100)))


def _encode_jpeg(image: Image.Image, quality: float, name: str) -> bytes:
    """Encode *image* as JPEG at *quality* (0-1]."""
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=OUTPUT_FORMAT, quality=_to_pillow_quality(quality), optimize=True)
    except (OSError, ValueError) as exc:
        raise ImageEncodeError(
            message=f"Failed to compress image {name}",
            context={"name": name, "quality": quality},
            cause=exc,
        ) from exc

    data = buffer.getvalue()
    if not data:
        raise ImageEncodeError(
            message=f"Failed to compress image {name}",
            context={"name": name, "quality": quality, "reason": "empty_output"},
        )
    return data


def normalize_image(file: PendingFile, config: UploaderConfig) -> NormalizedPayload:
    """Turn an image file into a square, size-budgeted JPEG.

    Parameters
    ----------
    file:
        An image file that passed validation.
    config:
        Supplies ``max_dimension``, the quality settings and
        ``target_size_bytes``.

    Returns
    -------
    NormalizedPayload
        The encoded square image.  Its name is the original stem with a
        ``.jpg`` extension, whatever the original extension was.

    Raises
    ------
    ImageDecodeError
        If the bytes cannot be decoded as an image.
    ImageEncodeError
        If JPEG encoding fails or produces no output.
    """
    t0 = time.monotonic()
    image = _decode(file)

    with image:
        geometry = compute_square_geometry(image.width, image.height, config.max_dimension)
        scaled = image
        if (geometry.scaled_width, geometry.scaled_height) != image.size:
            scaled = image.resize(
                (geometry.scaled_width, geometry.scaled_height),
                Image.Resampling.LANCZOS,
            )
        square = scaled.crop(geometry.box)

    quality = config.initial_quality
    data = _encode_jpeg(square, quality, file.name)
    passes = 1

    if len(data) > config.target_size_bytes and quality > config.quality_floor:
        quality = max(config.quality_floor, round(quality - config.quality_step, 4))
        data = _encode_jpeg(square, quality, file.name)
        passes = 2

    payload = NormalizedPayload(
        name=with_extension(file.name, OUTPUT_EXTENSION),
        data=data,
        width=geometry.side,
        height=geometry.side,
        original_size=file.size_bytes,
        quality=quality,
        encode_passes=passes,
    )

    log.debug(
        "Image normalized",
        extra={
            "extra_fields": {
                "op": "normalize",
                "file": file.name,
                "original_size": payload.original_size,
                "encoded_size": payload.encoded_size,
                "dimensions": payload.dimensions,
                "quality": quality,
                "passes": passes,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            }
        },
    )
    return payload


async def async_normalize_image(file: PendingFile, config: UploaderConfig) -> NormalizedPayload:
    """Run :func:`normalize_image` in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, normalize_image, file, config)
