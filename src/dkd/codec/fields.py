"""Base64 helpers for the binary message fields.

The fields ``data``, ``key``, each value of ``keys`` and ``signature`` are
carried as standard base64 text in every message representation and as raw
bytes whenever they cross the crypto provider boundary.
"""
from __future__ import annotations

import base64
import binascii

from ..exceptions import MalformedMessageError


def b64encode(data: bytes) -> str:
    """Encode raw bytes as standard base64 text."""
    return base64.b64encode(data).decode("ascii")


def b64decode(text: str, field: str = "value") -> bytes:
    """Strictly decode base64 text.

    Parameters:
        text: Base64 text taken from a message field.
        field: Field name used in the error message.

    Returns:
        Decoded bytes.

    Raises:
        MalformedMessageError: If text is not a str or not valid base64.
    """
    if not isinstance(text, str):
        raise MalformedMessageError(f"{field} must be base64 text, got {type(text).__name__}")
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise MalformedMessageError(f"{field} is not valid base64") from e
