"""
Local disk storage for uploaded session media.

Files land in ``UPLOAD_DIR/<kind>/`` under a unique name and are served
from ``/uploads/<kind>/<name>``.
"""

import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from pydantic import BaseModel

from app.core.config import settings
from app.training.errors import ValidationError

logger = logging.getLogger(__name__)

MEDIA_KINDS = ("photos", "videos", "documents")
_CHUNK_SIZE = 1024 * 1024


class FileTooLarge(ValidationError):
    code = "file_too_large"


class StoredFile(BaseModel):
    url: str
    path: str
    filename: str
    original_name: str
    content_type: Optional[str] = None
    size_bytes: int


class MediaStorage:
    """Writes uploads to disk, enforcing the size limit while streaming."""

    def __init__(self, root: Optional[str] = None, base_url: Optional[str] = None, max_bytes: Optional[int] = None):
        self.root = Path(root or settings.UPLOAD_DIR)
        self.base_url = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
        self.max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES

    def save(self, kind: str, upload: UploadFile, field: str) -> StoredFile:
        if kind not in MEDIA_KINDS:
            raise ValueError(f"Unknown media kind: {kind!r}")

        directory = self.root / kind
        directory.mkdir(parents=True, exist_ok=True)
        original_name = upload.filename or field
        filename = f"{field}-{int(time.time() * 1000)}-{secrets.token_hex(4)}{Path(original_name).suffix.lower()}"
        path = directory / filename

        size = 0
        with path.open("wb") as out:
            while True:
                chunk = upload.file.read(_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_bytes:
                    break
                out.write(chunk)

        if size > self.max_bytes:
            path.unlink(missing_ok=True)
            if self.max_bytes >= 1024 * 1024:
                limit = f"{self.max_bytes // (1024 * 1024)}MB"
            else:
                limit = f"{self.max_bytes} bytes"
            raise FileTooLarge(f"File too large. Maximum size is {limit}.")

        logger.debug("Stored %s (%d bytes) as %s", original_name, size, path)
        return StoredFile(url=f"{self.base_url}/uploads/{kind}/{filename}", path=str(path), filename=filename,
                          original_name=original_name, content_type=upload.content_type, size_bytes=size, )

    def delete(self, stored: StoredFile) -> None:
        Path(stored.path).unlink(missing_ok=True)
