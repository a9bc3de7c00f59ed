"""Reversible obfuscation of parameter values carried in URLs.

A token is ``base64(value + "|" + secret_key)`` with the base64 alphabet
translated to URL-friendly characters. This deters casual tampering; it is
not encryption.
"""

from __future__ import annotations

import base64
import binascii
import secrets
import string

SEPARATOR = "|"

_TO_URL = str.maketrans("+/=", "-_,")
_FROM_URL = str.maketrans("-_,", "+/=")

# Never contains the separator, so a generated key always round-trips.
_KEY_ALPHABET = (
    string.ascii_letters + string.digits + "".join(c for c in string.punctuation if c != SEPARATOR)
)


def encode_value(value: str, secret_key: str) -> str:
    """Return the URL-safe token for *value* bound to *secret_key*."""
    raw = f"{value}{SEPARATOR}{secret_key}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii").translate(_TO_URL)


def decode_value(token: str, secret_key: str) -> str:
    """Invert :func:`encode_value`.

    Anything that is not a token issued under *secret_key* comes back
    unchanged: structurally invalid input, a wrong part count, or a key
    that has since been rotated.

    Args:
        token:      Value as received in the query string.
        secret_key: The currently configured key.

    Returns:
        The original value, or *token* itself when it cannot be decoded.
    """
    try:
        decoded = base64.b64decode(token.translate(_FROM_URL), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return token

    parts = decoded.split(SEPARATOR)
    if len(parts) != 2 or parts[1] != secret_key:
        return token
    return parts[0]


def generate_secret_key(length: int = 32) -> str:
    """Create a random key suitable for :func:`encode_value`."""
    return "".join(secrets.choice(_KEY_ALPHABET) for _ in range(length))


class Codec:
    """Binds the encode/decode pair to one secret key."""

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key

    def encode(self, value: str) -> str:
        return encode_value(value, self._secret_key)

    def decode(self, token: str) -> str:
        return decode_value(token, self._secret_key)
