"""
image_data.py — decoding of the Base64 data URIs the camera frontend sends.

  data:image/jpeg;base64,/9j/4AAQ...  →  (raw bytes, "image/jpeg")

Anything else is reported as MalformedInput.
"""
from __future__ import annotations

import base64
import binascii
import re

from extraction.types import ErrorKind, ExtractionError

_DATA_URI_HEADER = re.compile(r"^data:([^;,]+);base64$")


def decode_data_uri(image_data: object) -> tuple[bytes, str]:
    """Split a Base64 data URI into (bytes, mime_type). Raises ExtractionError."""
    if not isinstance(image_data, str):
        raise ExtractionError(
            ErrorKind.MALFORMED_INPUT,
            "imageData must be a string (Base64 data URI)",
        )
    if not image_data.startswith("data:"):
        raise ExtractionError(
            ErrorKind.MALFORMED_INPUT,
            "Unsupported image data format. Please provide a Base64 data URI "
            "(data:image/*;base64,...)",
        )

    header, sep, payload = image_data.partition(",")
    match = _DATA_URI_HEADER.match(header)
    if not sep or not match:
        raise ExtractionError(ErrorKind.MALFORMED_INPUT, "Could not parse MIME type from data URI")

    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ExtractionError(ErrorKind.MALFORMED_INPUT, f"Invalid Base64 payload: {exc}") from exc
    if not image_bytes:
        raise ExtractionError(ErrorKind.MALFORMED_INPUT, "Data URI carries no image data")

    return image_bytes, match.group(1).strip()


def sniff_mime(image_bytes: bytes) -> str:
    """Guess the image MIME type from magic bytes (defaults to JPEG)."""
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"GIF8":
        return "image/gif"
    if image_bytes[:4] == b"RIFF":
        return "image/webp"
    return "image/jpeg"
