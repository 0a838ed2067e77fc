"""
Report image storage.

Images go to the S3 bucket when STORAGE_PROVIDER=s3 and to the local
filesystem otherwise (served by the app under /storage). A failed S3 write
falls back to local storage; StorageError is raised only when neither works.
"""

from pathlib import Path
from typing import Optional
import logging
import re
import time

from .config import get_settings
from .storage_s3 import S3Storage, StorageError

logger = logging.getLogger("app.storage")

SETTINGS = get_settings()

LOCAL_STORAGE_PATH = SETTINGS.local_storage_path
try:
    LOCAL_STORAGE_PATH.mkdir(parents=True, exist_ok=True)
except PermissionError:
    import tempfile

    LOCAL_STORAGE_PATH = Path(tempfile.mkdtemp(prefix="civic_storage_"))
    logger.warning(
        "Could not create %s; falling back to temp storage %s",
        SETTINGS.local_storage_path,
        LOCAL_STORAGE_PATH,
    )

_s3: Optional[S3Storage] = None
if SETTINGS.storage_provider == "s3":
    try:
        _s3 = S3Storage()
        _s3.ensure_bucket()
    except Exception as exc:  # pragma: no cover - initialization failure
        logger.error(
            "Failed to initialize S3 storage, falling back to local filesystem: %s", exc
        )
        _s3 = None

logger.info("Storage initialized (provider=%s)", "s3" if _s3 else "local")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_image_key(owner_id: str, file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """Object key for a report image: `{owner_id}/{epoch_ms}-{file_name}`."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    safe_name = _UNSAFE_CHARS.sub("_", Path(file_name or "image").name).strip("._") or "image"
    return f"{owner_id}/{timestamp_ms}-{safe_name}"


def _local_url(key: str) -> str:
    path = f"{SETTINGS.report_image_bucket}/{key}"
    if SETTINGS.public_storage_base_url and not _s3:
        return f"{SETTINGS.public_storage_base_url.rstrip('/')}/{path}"
    return f"/storage/{path}"


def upload_report_image(owner_id: str, file_name: str, data: bytes, content_type: str = "image/jpeg") -> str:
    """
    Store one report image and return its public URL.

    Raises StorageError when the image could not be stored anywhere.
    """
    key = build_image_key(owner_id, file_name)

    if _s3:
        try:
            _s3.put_object(key, data, content_type)
            return _s3.public_url(key)
        except StorageError as exc:
            logger.error("Failed to upload image to S3, falling back to local storage: %s", exc)

    target = LOCAL_STORAGE_PATH / SETTINGS.report_image_bucket / key
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:
        raise StorageError(f"Failed to store {key} locally: {exc}") from exc

    logger.info("Stored report image locally: %s", target)
    return _local_url(key)
