"""Client-side image re-encoding for embedded image references.

Uploaded photos are decoded with Pillow, scaled so the longer edge fits a
ceiling, and re-encoded as JPEG.  The result is returned as a ``data:`` URI
that can be stored directly in the document.
"""

from __future__ import annotations

import base64
import io
import logging
import mimetypes
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from filmfolio.shared.errors import ImageDecodeError, ImageReadError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIMENSION = 1000
DEFAULT_QUALITY = 0.6


def read_image_source(source: Path | bytes) -> bytes:
    """Return the raw bytes of an image given as a path or bytes."""
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        try:
            data = Path(source).read_bytes()
        except OSError as exc:
            raise ImageReadError(f"Could not read image file '{source}': {exc.strerror or exc}") from exc
    if not data:
        raise ImageReadError("Image file is empty")
    return data


def guess_content_type(filename: str | None, data: bytes) -> str:
    """Best-effort MIME type from the file name, falling back to sniffing."""
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed and guessed.startswith("image/"):
            return guessed
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError):
        return "application/octet-stream"
    return Image.MIME.get(image_format or "", "application/octet-stream")


def compress_to_data_uri(
    data: bytes,
    *,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
    quality: float = DEFAULT_QUALITY,
) -> str:
    """Downscale and re-encode an image as a JPEG ``data:`` URI.

    Args:
        data: Encoded source image.
        max_dimension: Ceiling for the longer edge, in pixels. Smaller
            images are never upscaled.
        quality: JPEG quality between 0 and 1.

    Returns:
        ``data:image/jpeg;base64,...``

    Raises:
        ImageDecodeError: If Pillow cannot decode ``data``.
    """
    try:
        with Image.open(io.BytesIO(data)) as opened:
            opened.load()
            image = ImageOps.exif_transpose(opened)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"File is not a readable image: {exc}") from exc

    image = _flatten(image)
    original_size = image.size
    image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=round(quality * 100), optimize=True)
    encoded = buffer.getvalue()
    logger.debug(
        "Re-encoded image %sx%s -> %sx%s (%d -> %d bytes)",
        *original_size,
        *image.size,
        len(data),
        len(encoded),
    )
    return "data:image/jpeg;base64," + base64.b64encode(encoded).decode("ascii")


def _flatten(image: Image.Image) -> Image.Image:
    """Return an RGB image, compositing any transparency onto white."""
    has_alpha = image.mode in ("RGBA", "LA") or (
        image.mode == "P" and "transparency" in image.info
    )
    if has_alpha:
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image
