"""Client-side image checks and compression for attachment uploads."""

from __future__ import annotations

import io
import logging
import re

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

COMPRESSION_THRESHOLD_BYTES = 2 * 1024 * 1024
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MAX_WIDTH = 1920
MAX_HEIGHT = 1920
JPEG_QUALITY = 80


def is_image_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


def fit_dimensions(width: int, height: int) -> tuple[int, int]:
    """Scale (width, height) down to fit MAX_WIDTH x MAX_HEIGHT, keeping aspect ratio."""
    if width > height:
        if width > MAX_WIDTH:
            height = round(height * MAX_WIDTH / width)
            width = MAX_WIDTH
    elif height > MAX_HEIGHT:
        width = round(width * MAX_HEIGHT / height)
        height = MAX_HEIGHT
    return width, height


def jpeg_name(file_name: str) -> str:
    if re.search(r"\.[^.]+$", file_name):
        return re.sub(r"\.[^.]+$", ".jpg", file_name)
    return f"{file_name}.jpg"


def compress_image(content: bytes, file_name: str) -> tuple[bytes, str]:
    """Resize to fit 1920x1920 and re-encode as JPEG.

    Returns (jpeg_bytes, new_file_name). Raises UnidentifiedImageError or
    OSError if Pillow cannot decode the input.
    """
    with Image.open(io.BytesIO(content)) as img:
        img = img.convert("RGB")
        size = fit_dimensions(*img.size)
        if size != img.size:
            img = img.resize(size, Image.Resampling.LANCZOS)
        out = io.BytesIO()
        img.save(out, "JPEG", quality=JPEG_QUALITY)
    return out.getvalue(), jpeg_name(file_name)


def compress_image_if_needed(
    content: bytes,
    file_name: str,
    content_type: str,
    threshold: int = COMPRESSION_THRESHOLD_BYTES,
) -> tuple[bytes, str, str]:
    """Compress images above the threshold.

    Returns (content, file_name, content_type). Small files, and files
    Pillow cannot decode, are returned unchanged.
    """
    if len(content) <= threshold:
        return content, file_name, content_type

    try:
        compressed, new_name = compress_image(content, file_name)
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not compress {file_name}, keeping original: {e}")
        return content, file_name, content_type

    logger.info(f"Compressed {file_name}: {len(content)} -> {len(compressed)} bytes")
    return compressed, new_name, "image/jpeg"
