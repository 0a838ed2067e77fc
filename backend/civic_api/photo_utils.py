"""
Validation helpers for report images.

Uses Pillow (PIL) to confirm that an upload really is an image before it is
stored.
"""

from PIL import Image, UnidentifiedImageError
import io
from typing import Tuple, Optional
import logging

logger = logging.getLogger("app.photo_utils")

MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10 MB
MAX_IMAGE_DIMENSION = 8000  # pixels
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

_FORMAT_TO_MIME = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


def validate_image(file_data: bytes, file_name: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an uploaded image.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not file_data:
        return False, "File is empty"

    if len(file_data) > MAX_UPLOAD_SIZE:
        return False, f"File size exceeds {MAX_UPLOAD_SIZE / (1024*1024):.1f} MB limit"

    ext = "." + file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    if ext not in ALLOWED_EXTENSIONS:
        return False, f"File type not allowed. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"

    try:
        img = Image.open(io.BytesIO(file_data))
        img.verify()

        # verify() leaves the image unusable; reopen to read the size
        img = Image.open(io.BytesIO(file_data))
        width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        logger.warning("Image validation failed for %s: %s", file_name, e)
        return False, f"Invalid image file: {e}"

    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        return False, f"Image dimensions exceed {MAX_IMAGE_DIMENSION}px"

    return True, None


def detect_mime_type(file_data: bytes, file_name: str) -> str:
    """MIME type from the decoded image format, falling back to the extension."""
    try:
        fmt = Image.open(io.BytesIO(file_data)).format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
        fmt = None
    if fmt in _FORMAT_TO_MIME:
        return _FORMAT_TO_MIME[fmt]
    return get_mime_type(file_name)


def get_mime_type(file_name: str) -> str:
    """Get MIME type from file extension."""
    ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    mime_map = {
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "png": "image/png",
        "gif": "image/gif",
        "webp": "image/webp",
    }
    return mime_map.get(ext, "application/octet-stream")
