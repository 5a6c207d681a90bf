"""
Storage Service — directory-backed blob buckets with public URLs.
Objects are written whole; there is no streaming or partial upload.
"""
import logging
import os
from pathlib import Path

from neobank.config import get_settings

logger = logging.getLogger(__name__)

DOCUMENTS_BUCKET = "onboarding-documents"
RECEIPTS_BUCKET = "receipts"


class StorageService:
    """Upload and address objects in named buckets."""

    @staticmethod
    def _object_path(bucket: str, path: str) -> Path:
        root = (Path(get_settings().STORAGE_DIR) / bucket).resolve()
        target = (root / path).resolve()
        if root not in target.parents:
            raise ValueError(f"Invalid object path: {path}")
        return target

    @staticmethod
    def upload(bucket: str, path: str, contents: bytes) -> str:
        """Store an object and return its bucket-relative path.

        Raises:
            FileExistsError: if an object already exists at that path.
        """
        target = StorageService._object_path(bucket, path)
        if target.exists():
            raise FileExistsError(f"Object already exists: {bucket}/{path}")
        os.makedirs(target.parent, exist_ok=True)
        target.write_bytes(contents)
        logger.info("Stored %s/%s (%d bytes)", bucket, path, len(contents))
        return path

    @staticmethod
    def public_url(bucket: str, path: str) -> str:
        base = get_settings().STORAGE_PUBLIC_URL.rstrip("/")
        return f"{base}/{bucket}/{path}"

    @staticmethod
    def read(bucket: str, path: str) -> bytes:
        return StorageService._object_path(bucket, path).read_bytes()
