"""Local blob storage for avatars, product images and tutorial videos."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from uuid import uuid4

from garment_erp.core.errors import BusinessRuleError
from garment_erp.core.settings import get_app_settings

logger = logging.getLogger(__name__)

_SAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredFile:
    path: str
    url: str
    size: int


class FileStorage:
    """
    Stores files under `root/<bucket>/` and exposes them under `public_path`.

    Paths handed back are relative to root (e.g. "avatars/1f0c..._me.png");
    urls are what the static mount serves.
    """

    def __init__(self, root: str | Path, public_path: str = "/files") -> None:
        self.root = Path(root).resolve()
        self.public_path = "/" + public_path.strip("/")

    def _safe_name(self, filename: Optional[str]) -> str:
        base = Path(filename or "file").name
        base = _SAFE_CHARS.sub("_", base).strip("._") or "file"
        return f"{uuid4().hex}_{base[-120:]}"

    # PUBLIC_INTERFACE
    def path_for(self, url_or_path: str) -> Path:
        """Resolve a stored path or public url to a filesystem path inside root."""
        rel = url_or_path
        if rel.startswith(self.public_path + "/"):
            rel = rel[len(self.public_path) + 1:]
        rel = rel.lstrip("/")
        target = (self.root / rel).resolve()
        if target != self.root and self.root not in target.parents:
            raise BusinessRuleError("Invalid storage path", {"path": url_or_path})
        return target

    # PUBLIC_INTERFACE
    def url_for(self, path: str) -> str:
        return f"{self.public_path}/{path}"

    # PUBLIC_INTERFACE
    def save(self, bucket: str, filename: Optional[str], data: bytes) -> StoredFile:
        """Write data under a unique name in bucket and return where it landed."""
        bucket = _SAFE_CHARS.sub("_", bucket).strip("._") or "misc"
        rel = f"{bucket}/{self._safe_name(filename)}"
        target = self.path_for(rel)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored file %s (%d bytes)", rel, len(data))
        return StoredFile(path=rel, url=self.url_for(rel), size=len(data))

    # PUBLIC_INTERFACE
    def delete(self, url_or_path: Optional[str]) -> bool:
        """Remove a stored file; returns False when there was nothing to remove."""
        if not url_or_path:
            return False
        target = self.path_for(url_or_path)
        if not target.is_file():
            return False
        target.unlink()
        logger.info("Deleted stored file %s", url_or_path)
        return True


# PUBLIC_INTERFACE
@lru_cache
def get_file_storage() -> FileStorage:
    """Process-wide storage rooted at STORAGE_ROOT."""
    settings = get_app_settings()
    return FileStorage(settings.STORAGE_ROOT, settings.STORAGE_PUBLIC_PATH)
