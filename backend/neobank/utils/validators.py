"""
Validators — Regex and rule-based validation for UAE onboarding identifiers
and uploaded files.
"""
import base64
import binascii
import re
from pathlib import Path

# Browser file picker accepts images and PDF
ALLOWED_UPLOAD_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "heic": "image/heic",
}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def validate_emirates_id(number: str | None) -> bool:
    """Validate Emirates ID format: 784-YYYY-NNNNNNN-C (dashes optional)."""
    if not number:
        return False
    cleaned = re.sub(r"[\s-]", "", number)
    return bool(re.match(r"^784\d{12}$", cleaned))


def validate_trade_license(number: str | None) -> bool:
    """Trade license numbers are 3-32 alphanumerics, dashes or slashes."""
    if not number:
        return False
    return bool(re.match(r"^[A-Za-z0-9][A-Za-z0-9/-]{2,31}$", number.strip()))


def validate_email(email: str | None) -> bool:
    if not email:
        return False
    return bool(re.match(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$", email.strip()))


def validate_iban(iban: str | None) -> bool:
    """ISO 13616 IBAN: country code, check digits, then a mod-97 checksum of 1."""
    if not iban:
        return False
    cleaned = re.sub(r"\s", "", iban).upper()
    if not re.match(r"^[A-Z]{2}\d{2}[A-Z0-9]{11,30}$", cleaned):
        return False
    rearranged = cleaned[4:] + cleaned[:4]
    digits = "".join(str(int(ch, 36)) for ch in rearranged)
    return int(digits) % 97 == 1


def upload_extension(filename: str | None) -> str:
    """Return the lowercase extension of an acceptable upload.

    Raises:
        ValueError: when the file is not an image or PDF.
    """
    ext = Path(filename or "").suffix.lstrip(".").lower()
    if ext not in ALLOWED_UPLOAD_TYPES:
        raise ValueError(
            f"File type '.{ext}' not allowed. Allowed: {', '.join(sorted(ALLOWED_UPLOAD_TYPES))}"
        )
    return ext


def to_data_url(contents: bytes, mime: str) -> str:
    """Encode file contents the way a browser FileReader.readAsDataURL does."""
    return f"data:{mime};base64,{base64.b64encode(contents).decode('ascii')}"


def parse_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a base64 data URL into (mime type, raw bytes).

    Raises:
        ValueError: if the string is not a base64 data URL of an allowed type.
    """
    match = _DATA_URL_RE.match(data_url or "")
    if not match:
        raise ValueError("Document must be a base64 data URL")
    mime = match.group("mime").lower()
    if mime not in ALLOWED_UPLOAD_TYPES.values():
        raise ValueError(f"Content type '{mime}' not allowed")
    try:
        raw = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Document data is not valid base64")
    return mime, raw
