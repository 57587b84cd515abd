# vidtube/core/ids.py
"""
Entity identifiers.

Every entity is keyed by a 24-character hex string (12 bytes): a 4-byte
big-endian creation timestamp followed by 8 random bytes. Identifiers are
generated on create and never change.
"""
import re
import secrets
import time

from vidtube.core.errors import BadRequestError

OBJECT_ID_LENGTH = 24
_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    """Generate a fresh identifier (sortable by creation second)."""
    ts = int(time.time()).to_bytes(4, "big")
    return (ts + secrets.token_bytes(8)).hex()


def is_valid_object_id(value) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def parse_object_id(value, label: str = "ID") -> str:
    """
    Validate an identifier coming from the client.

    Raises:
        BadRequestError (400): If the value is not a 24-char hex string.
    """
    if not is_valid_object_id(value):
        raise BadRequestError(f"Invalid {label}")
    return value.lower()
