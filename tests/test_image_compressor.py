# tests/test_image_compressor.py
import io
import os

import pytest
from PIL import Image

from app.core import storage_utils
from app.core.exceptions import ImageCompressionError
from app.core.image_compressor import compress_image


def encode(img: Image.Image, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def noise(width: int, height: int) -> Image.Image:
    # Random pixels barely compress, so the size budget is actually tested
    return Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))


def test_large_image_fits_the_budget_and_is_jpeg():
    data = encode(noise(1200, 900))
    budget = 150 * 1024
    assert len(data) > budget

    out = compress_image(data, max_bytes=budget)

    assert len(out) <= budget
    img = Image.open(io.BytesIO(out))
    assert img.format == "JPEG"
    assert img.mode == "RGB"


def test_oversized_dimensions_are_scaled_down_proportionally():
    data = encode(Image.new("RGB", (4000, 1000), (200, 120, 40)))

    out = compress_image(data)

    img = Image.open(io.BytesIO(out))
    assert img.size == (2048, 512)


def test_small_image_keeps_its_size():
    data = encode(Image.new("RGB", (64, 48), (10, 20, 30)))

    out = compress_image(data)

    img = Image.open(io.BytesIO(out))
    assert img.size == (64, 48)
    assert img.format == "JPEG"


def test_transparent_png_is_flattened_onto_white():
    data = encode(Image.new("RGBA", (10, 10), (0, 0, 0, 0)))

    out = compress_image(data)

    img = Image.open(io.BytesIO(out))
    assert img.mode == "RGB"
    r, g, b = img.getpixel((5, 5))
    assert min(r, g, b) > 240


def test_undecodable_bytes_raise():
    with pytest.raises(ImageCompressionError, match="Failed to load image"):
        compress_image(b"definitely not an image")


def test_image_over_the_pixel_limit_is_rejected(monkeypatch):
    # Past twice the limit Pillow refuses to open the file at all
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    data = encode(Image.new("RGB", (100, 100), (10, 20, 30)))

    with pytest.raises(ImageCompressionError, match="Failed to load image"):
        compress_image(data)


def test_upload_image_rejects_non_image_content_type(fake_storage):
    with pytest.raises(ImageCompressionError):
        storage_utils.upload_image("products", b"%PDF-1.4", "application/pdf")

    assert fake_storage.uploads == {}


def test_upload_image_stores_compressed_jpeg(fake_storage):
    data = encode(Image.new("RGB", (32, 32), (0, 128, 0)))

    url = storage_utils.upload_image("products", data, "image/png")

    [(path, (stored, content_type))] = fake_storage.uploads.items()
    assert path.startswith("products/") and path.endswith(".jpg")
    assert content_type == "image/jpeg"
    assert stored[:2] == b"\xff\xd8"
    assert url.endswith(path)
    assert storage_utils.extract_path_from_public_url(url) == path
