from __future__ import annotations

import base64
import binascii
import logging
import re
import time
import uuid
from pathlib import Path

from services.errors import StorageError, ValidationError
from settings import settings

logger = logging.getLogger("cashbook.storage")

_DATA_URI_RE = re.compile(r"^data:([^;,]+)((?:;[^;,]*)*);base64,(.*)$", re.DOTALL | re.IGNORECASE)
_EXT_RE = re.compile(r"[^A-Za-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")


def _extension(mime_type: str) -> str:
    sub = mime_type.split("/", 1)[1] if "/" in mime_type else ""
    # image/svg+xml -> svg
    sub = sub.split("+", 1)[0]
    ext = _EXT_RE.sub("", sub).lower()
    return ext or "bin"


def decode_data_uri(value: str) -> tuple[str, bytes]:
    """
    Parse data:<mime>[;param=...];base64,<payload>.
    Line-wrapped and unpadded payloads are accepted, anything else
    outside the base64 alphabet is not.
    """
    m = _DATA_URI_RE.match((value or "").strip())
    if not m:
        raise ValidationError("Invalid proof format", code="INVALID_PROOF_FORMAT")

    mime_type = m.group(1).strip().lower()
    encoded = _WHITESPACE_RE.sub("", m.group(3))
    encoded += "=" * (-len(encoded) % 4)
    try:
        payload = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid proof format", code="INVALID_PROOF_FORMAT")

    if not payload:
        raise ValidationError("Proof is empty", code="INVALID_PROOF_FORMAT")
    if len(payload) > settings.MAX_PROOF_BYTES:
        raise ValidationError("Proof exceeds the upload size limit", code="PROOF_TOO_LARGE")
    return mime_type, payload


def store_proof(data_uri: str, *, upload_dir: str | Path | None = None) -> str:
    """
    Persist a base64 data-URI and return the opaque reference (the filename)
    that gets stored on the payout request.
    """
    mime_type, payload = decode_data_uri(data_uri)

    target_dir = Path(upload_dir or settings.UPLOAD_DIR)
    file_name = f"payout-{int(time.time() * 1000)}-{uuid.uuid4()}.{_extension(mime_type)}"
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / file_name).write_bytes(payload)
    except OSError as exc:
        raise StorageError() from exc

    logger.info("proof stored file=%s bytes=%s mime=%s", file_name, len(payload), mime_type)
    return file_name


def discard_proof(file_name: str, *, upload_dir: str | Path | None = None) -> None:
    """
    Remove a stored proof whose payout request never committed.
    """
    path = Path(upload_dir or settings.UPLOAD_DIR) / file_name
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.exception("proof cleanup failed file=%s", file_name)
        return
    logger.info("proof discarded file=%s", file_name)
