# hickory/core/row_version.py
import base64
import binascii

from hickory.core.exceptions import ValidationError

ROW_VERSION_BYTES = 8

INITIAL_ROW_VERSION = (1).to_bytes(ROW_VERSION_BYTES, "big")


def next_row_version(current: bytes) -> bytes:
    # strictly increasing, so a version never comes back
    value = int.from_bytes(current, "big") + 1
    return (value % (1 << (8 * ROW_VERSION_BYTES))).to_bytes(ROW_VERSION_BYTES, "big")


def encode_row_version(version: bytes) -> str:
    return base64.b64encode(version).decode("ascii")


def decode_row_version(token: str) -> bytes:
    try:
        raw = base64.b64decode(token.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValidationError("rowVersion must be the base64 value returned by the last read.") from e
    if not raw:
        raise ValidationError("rowVersion is required.")
    return raw
