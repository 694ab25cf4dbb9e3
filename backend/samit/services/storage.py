"""
Object storage for uploaded binaries (CVs, legal documents).

Files live under ``settings.storage_dir/<bucket>/<path>`` and are addressed
by public URLs under ``<site_url>/storage/<bucket>/<path>``. The rows that
reference them only keep the URL and the in-bucket path.
"""
import asyncio
import logging
import os
import re
import time
from pathlib import Path
from typing import Optional

from samit.config import settings

logger = logging.getLogger(__name__)

RESUMES_BUCKET = "resumes"
LEGAL_DOCUMENTS_BUCKET = "legal-documents"
BUCKETS = {RESUMES_BUCKET, LEGAL_DOCUMENTS_BUCKET}

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


class StorageError(Exception):
    """Raised when an upload or delete cannot be completed"""
    pass


def safe_filename(filename: str) -> str:
    """Replace everything except letters, digits, dots and dashes."""
    return _UNSAFE_CHARS.sub("_", filename or "file")


def build_object_path(owner_id, filename: str, prefix: str = "") -> str:
    """``<owner_id>/<prefix><epoch ms>_<safe filename>``"""
    return f"{owner_id}/{prefix}{int(time.time() * 1000)}_{safe_filename(filename)}"


class ObjectStorage:
    def __init__(self, root: Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        if bucket not in BUCKETS:
            raise StorageError(f"Unknown bucket {bucket}")
        parts = Path(path).parts
        if not parts or Path(path).is_absolute() or ".." in parts:
            raise StorageError(f"Invalid object path {path}")
        return self.root / bucket / path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{path}"

    async def upload(self, bucket: str, path: str, data: bytes) -> str:
        """Store ``data`` and return its public URL."""
        target = self._resolve(bucket, path)

        def _write():
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageError(f"Failed to store {bucket}/{path}: {e}") from e
        
        logger.info(f"Stored {bucket}/{path} ({len(data)} bytes)")
        return self.public_url(bucket, path)

    async def delete(self, bucket: str, path: str) -> None:
        target = self._resolve(bucket, path)

        def _remove():
            if target.exists():
                os.remove(target)

        try:
            await asyncio.to_thread(_remove)
        except OSError as e:
            raise StorageError(f"Failed to delete {bucket}/{path}: {e}") from e


_storage: Optional[ObjectStorage] = None


def get_storage() -> ObjectStorage:
    """FastAPI dependency returning the process-wide storage."""
    global _storage
    if _storage is None:
        _storage = ObjectStorage(Path(settings.storage_dir), settings.get_site_url())
    return _storage
