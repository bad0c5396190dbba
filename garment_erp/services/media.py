from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import UploadFile

from garment_erp.core.errors import BusinessRuleError
from garment_erp.core.settings import get_app_settings
from garment_erp.services.storage import StoredFile, get_file_storage

logger = logging.getLogger(__name__)

IMAGE = "image/"
VIDEO = "video/"

READ_CHUNK_BYTES = 1024 * 1024


# PUBLIC_INTERFACE
async def store_upload(file: UploadFile, bucket: str, media_prefix: str = IMAGE) -> StoredFile:
    """
    Validate an uploaded file's content type and size, then store it in bucket.

    Raises BusinessRuleError when the type does not start with media_prefix
    or the file is empty or over MAX_UPLOAD_MB.
    """
    content_type = (file.content_type or "").lower()
    if not content_type.startswith(media_prefix):
        raise BusinessRuleError(
            f"Expected a {media_prefix.rstrip('/')} file",
            {"content_type": file.content_type},
        )
    limit_mb = get_app_settings().MAX_UPLOAD_MB
    limit = limit_mb * 1024 * 1024
    chunks: List[bytes] = []
    received = 0
    while True:
        chunk = await file.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        received += len(chunk)
        if received > limit:
            raise BusinessRuleError(f"File exceeds the {limit_mb} MB upload limit", {"limit_mb": limit_mb})
        chunks.append(chunk)
    if not received:
        raise BusinessRuleError("Uploaded file is empty")
    return get_file_storage().save(bucket, file.filename, b"".join(chunks))


# PUBLIC_INTERFACE
def discard_file(url_or_path: Optional[str]) -> None:
    """Remove a replaced or orphaned file; failures are logged only."""
    if not url_or_path:
        return
    try:
        get_file_storage().delete(url_or_path)
    except Exception:
        logger.exception("Failed to remove stored file %s", url_or_path)
