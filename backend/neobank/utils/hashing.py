"""
Hashing Utilities — SHA-256 digests for stored documents.
"""
import hashlib


def hash_bytes(contents: bytes) -> str:
    """SHA-256 hex digest of raw file contents."""
    return hashlib.sha256(contents).hexdigest()
