# app/core/image_compressor.py
"""
Shrink uploaded pictures so they fit the storage size budget.

The output is always a baseline RGB JPEG, whatever the input format,
so the compression loop behaves the same for PNG, WEBP or camera JPEGs.
"""

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from app.core.exceptions import ImageCompressionError

logger = logging.getLogger(__name__)

MAX_BYTES = 4 * 1024 * 1024
MAX_DIMENSION = 2048

OUTPUT_FORMAT = "JPEG"
OUTPUT_CONTENT_TYPE = "image/jpeg"
OUTPUT_EXTENSION = "jpg"

START_QUALITY = 90
QUALITY_STEP = 10
MIN_QUALITY = 30
RESET_QUALITY = 60
SHRINK_FACTOR = 0.8
MAX_SHRINK_ROUNDS = 10


def _load(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageCompressionError("Failed to load image") from exc

    img = ImageOps.exif_transpose(img)

    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        # JPEG has no alpha channel: flatten onto white
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return img.convert("RGB")


def _fit_within(img: Image.Image, max_dimension: int) -> Image.Image:
    width, height = img.size
    if width <= max_dimension and height <= max_dimension:
        return img
    ratio = min(max_dimension / width, max_dimension / height)
    new_size = (max(1, round(width * ratio)), max(1, round(height * ratio)))
    return img.resize(new_size, Image.LANCZOS)


def _encode(img: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=OUTPUT_FORMAT, quality=quality, optimize=True)
    return buf.getvalue()


def compress_image(
    data: bytes,
    max_bytes: int = MAX_BYTES,
    max_dimension: int = MAX_DIMENSION,
) -> bytes:
    """
    Re-encode an image so it is at most `max_bytes` long.

    Steps:
      1. Decode; anything Pillow cannot open raises ImageCompressionError.
      2. Downscale proportionally so no side exceeds `max_dimension`.
      3. Encode as JPEG at quality 90, 80, ... down to 30 until it fits.
      4. Still too big: shrink both sides by 20%, restart at quality 60.
      5. After MAX_SHRINK_ROUNDS shrinks, return the smallest encoding seen.

    Safe to call concurrently: every call works on its own image object.
    """
    img = _fit_within(_load(data), max_dimension)

    quality = START_QUALITY
    smallest: bytes | None = None

    for _ in range(MAX_SHRINK_ROUNDS + 1):
        while True:
            encoded = _encode(img, quality)
            if smallest is None or len(encoded) < len(smallest):
                smallest = encoded
            if len(encoded) <= max_bytes:
                return encoded
            if quality - QUALITY_STEP < MIN_QUALITY:
                break
            quality -= QUALITY_STEP

        width, height = img.size
        if width <= 1 and height <= 1:
            break
        img = img.resize(
            (max(1, int(width * SHRINK_FACTOR)), max(1, int(height * SHRINK_FACTOR))),
            Image.LANCZOS,
        )
        quality = RESET_QUALITY

    logger.warning(
        "Image still %d bytes after %d shrink rounds (budget %d)",
        len(smallest), MAX_SHRINK_ROUNDS, max_bytes,
    )
    return smallest
