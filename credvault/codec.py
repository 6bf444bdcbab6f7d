"""
Text encoding of encrypted fields.

A token is the standard base-64 of salt, nonce and ciphertext joined by
config.TOKEN_DELIMITER:

    <base64(salt)>:<base64(nonce)>:<base64(ciphertext)>
"""

import base64
import binascii
from typing import Tuple

from . import config
from .errors import FormatError


def encode(salt: bytes, nonce: bytes, ciphertext: bytes) -> str:
    """Render (salt, nonce, ciphertext) as a single token string."""
    return config.TOKEN_DELIMITER.join(
        base64.b64encode(bytes(part)).decode('ascii') for part in (salt, nonce, ciphertext)
    )


def decode(token: str) -> Tuple[bytes, bytes, bytes]:
    """
    Parse a token back into (salt, nonce, ciphertext).

    Raises:
        FormatError: If the token does not have exactly three segments or a
            segment is not valid base-64
    """
    if not isinstance(token, str):
        raise FormatError("Token must be a string")
    parts = token.split(config.TOKEN_DELIMITER)
    if len(parts) != 3:
        raise FormatError(f"Token must have 3 segments, got {len(parts)}")
    try:
        salt, nonce, ciphertext = (base64.b64decode(part, validate=True) for part in parts)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Token segment is not valid base-64: {e}") from e
    return salt, nonce, ciphertext
