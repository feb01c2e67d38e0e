"""Disk sink for payment-proof uploads."""

import logging
import os
import re
import time
from typing import Optional

from errors import PayloadTooLarge, UnsupportedMedia

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    'image/jpeg': ('.jpg', '.jpeg'),
    'image/png': ('.png',),
    'application/pdf': ('.pdf',),
}

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def sanitize_filename(filename: str) -> str:
    name = os.path.basename(filename.replace('\\', '/'))
    name = _UNSAFE_CHARS.sub('_', name).lstrip('.')
    return name or 'upload'


def validate_payment_proof(filename: str, content_type: Optional[str], size: int, max_bytes: int) -> None:
    content_type = (content_type or '').split(';')[0].strip().lower()
    ext = os.path.splitext(filename)[1].lower()
    if ext not in ALLOWED_CONTENT_TYPES.get(content_type, ()):
        logger.info("Rejected upload %r (%s)", filename, content_type or 'no content type')
        raise UnsupportedMedia()
    if size > max_bytes:
        logger.info("Rejected upload %r: %d bytes", filename, size)
        raise PayloadTooLarge(f"File too large (limit {max_bytes // (1024 * 1024)} MB)")


def store_payment_proof(data: bytes, filename: str, upload_dir: str) -> str:
    """Write the file as ``<epoch millis>-<name>`` and return the stored name."""
    os.makedirs(upload_dir, exist_ok=True)
    safe = sanitize_filename(filename)
    stamp = int(time.time() * 1000)
    while True:
        stored = f"{stamp}-{safe}"
        try:
            with open(os.path.join(upload_dir, stored), 'xb') as fh:
                fh.write(data)
            return stored
        except FileExistsError:
            stamp += 1


def remove_payment_proof(stored: str, upload_dir: str) -> None:
    try:
        os.remove(os.path.join(upload_dir, stored))
    except OSError:
        logger.warning("Could not remove orphaned upload %s", stored, exc_info=True)
