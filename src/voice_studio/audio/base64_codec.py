from __future__ import annotations

import base64
import binascii

from .errors import AudioDecodeError


def _check_padding(b64: str) -> None:
    # b64decode(validate=True) still accepts surplus "=" before 3.13.
    if len(b64) % 4:
        raise AudioDecodeError(f"Invalid base64 audio payload: length {len(b64)} is not a multiple of 4")
    body = b64.rstrip("=")
    if "=" in body or len(b64) - len(body) > 2:
        raise AudioDecodeError("Invalid base64 audio payload: misplaced padding")


class Base64AudioCodec:
    """Base64 encode/decode helpers for audio payloads."""

    @staticmethod
    def encode(data: bytes) -> str:
        """Encode raw bytes to base64 string (standard alphabet, padded)."""
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def decode(b64: str) -> bytes:
        """Decode base64 string into raw bytes. Raises AudioDecodeError on invalid input."""
        _check_padding(b64)
        try:
            return base64.b64decode(b64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AudioDecodeError(f"Invalid base64 audio payload: {exc}") from exc


def decode(b64: str) -> bytes:
    """Decode a base64 audio payload. Every call decodes afresh; nothing is cached."""
    return Base64AudioCodec.decode(b64)
