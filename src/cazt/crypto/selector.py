"""
Function, event and note selectors.

A function or event selector is the low 4 bytes of the field hash of its
signature text, e.g. "transfer(Field,Field)". A note selector is a small
type id and must fit in 7 bits.
"""

from __future__ import annotations

from cazt.crypto.field import HEX_PREFIX, FieldError, field_to_bytes32, is_hex_digits
from cazt.crypto.hashing import hash_bytes

SELECTOR_SIZE_IN_BYTES = 4
NOTE_SELECTOR_BITS = 7


class SelectorError(FieldError):
    """Raised for values that do not fit a selector."""
    pass


def selector_from_signature(signature: str) -> int:
    """Selector of a function or event signature."""
    if not signature:
        raise SelectorError("signature must not be empty")
    digest = field_to_bytes32(hash_bytes(signature.encode("utf-8")))
    return int.from_bytes(digest[-SELECTOR_SIZE_IN_BYTES:], "big")


def selector_from_field(value: int) -> int:
    if not 0 <= value < 1 << (8 * SELECTOR_SIZE_IN_BYTES):
        raise SelectorError(f"Selector must fit in {SELECTOR_SIZE_IN_BYTES} bytes, got {value:#x}")
    return value


def selector_from_string(text: str) -> int:
    """Parse a 0x-prefixed selector of at most 8 hex digits."""
    digits = text[len(HEX_PREFIX):] if text.startswith(HEX_PREFIX) else text
    if not digits or len(digits) > 2 * SELECTOR_SIZE_IN_BYTES or not is_hex_digits(digits):
        raise SelectorError(f"Invalid selector: {text!r}")
    return int(digits, 16)


def note_selector_from_field(value: int) -> int:
    if not 0 <= value < 1 << NOTE_SELECTOR_BITS:
        raise SelectorError(f"Note selector must be below {1 << NOTE_SELECTOR_BITS}, got {value}")
    return value


def selector_to_hex(selector: int) -> str:
    return f"{HEX_PREFIX}{selector:08x}"
