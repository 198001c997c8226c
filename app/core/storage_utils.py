# app/core/storage_utils.py
import logging
import time
import uuid

from app.core.config import get_settings
from app.core.exceptions import ImageCompressionError, StorageError
from app.core.image_compressor import OUTPUT_CONTENT_TYPE, OUTPUT_EXTENSION, compress_image
from app.core.supabase_client import supabase_admin

settings = get_settings()
logger = logging.getLogger(__name__)

BUCKET = settings.STORAGE_BUCKET

# Folders inside the bucket
PRODUCTS_FOLDER = "products"
SITE_FOLDER = "site"


def _bucket():
    """Storage handle for the images bucket (client is created lazily)."""
    return supabase_admin().storage.from_(BUCKET)


def upload_to_storage(path: str, file_bytes: bytes, content_type: str = "image/jpeg") -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    If a file already exists at this path, it will be overwritten
    thanks to the 'upsert' option.

    Args:
        path: Full object path inside the bucket.
              Example: "products/1718000000-3f2a9c.jpg"
        file_bytes: File content in bytes.

    Returns:
        Public URL to the uploaded file.

    Raises:
        StorageError: if the Supabase client rejects the upload.
    """
    bucket = _bucket()
    try:
        bucket.upload(path, file_bytes, {"content-type": content_type, "upsert": "true"})
    except Exception as exc:
        logger.error("Upload of %s failed: %s", path, exc)
        raise StorageError("Image upload failed") from exc
    return bucket.get_public_url(path)


def delete_from_storage(path: str) -> None:
    """
    Delete a file from Supabase Storage by its object path.

    Example path (relative to bucket):
        'products/1718000000-3f2a9c.jpg'
    """
    # Supabase Python client expects a list of paths.
    _bucket().remove([path])


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/product-images/site/logo.jpg
        -> 'site/logo.jpg'
    """
    marker = f"/storage/v1/object/public/{BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    return url[idx + len(marker) :]


def delete_public_url(url: str) -> bool:
    """
    Best-effort delete of a file by its public URL.

    No-op if the URL does not belong to this bucket. Failures are logged,
    never raised: a stale file in the bucket must not block the caller.

    Returns:
        True if a removal was issued successfully.
    """
    path = extract_path_from_public_url(url)
    if not path:
        return False
    try:
        delete_from_storage(path)
    except Exception as exc:
        logger.warning("Could not delete %s from storage: %s", path, exc)
        return False
    return True


def generate_filename(ext: str) -> str:
    """
    Generate a unique filename: "<epoch-ms>-<short uuid>.<ext>".

    Args:
        ext: File extension without dot (e.g. "jpg")
    """
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{ext}"


def upload_image(folder: str, file_bytes: bytes, content_type: str | None) -> str:
    """
    Compress an uploaded picture and store it under `folder/`.

    Compression finishes before the upload starts; the stored object is
    always a JPEG no larger than IMAGE_MAX_BYTES.

    Raises:
        ImageCompressionError: not an image / cannot be decoded.
        StorageError: the bucket rejected the upload.
    """
    if not content_type or not content_type.startswith("image/"):
        raise ImageCompressionError("File must be an image (JPG, PNG or WebP)")

    compressed = compress_image(
        file_bytes,
        max_bytes=settings.IMAGE_MAX_BYTES,
        max_dimension=settings.IMAGE_MAX_DIMENSION,
    )
    logger.info(
        "Compressed upload for %s/: %d -> %d bytes", folder, len(file_bytes), len(compressed)
    )

    path = f"{folder}/{generate_filename(OUTPUT_EXTENSION)}"
    return upload_to_storage(path, compressed, OUTPUT_CONTENT_TYPE)
