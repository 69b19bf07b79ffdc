"""
Field codec: text and byte conversions for BN254 scalar field elements.

Every value the ledger hashes or encrypts is an element of the BN254 scalar
field Fr. This module is the single place where user-supplied text becomes
a field element and where field elements are packed into the fixed-width
byte layouts used by private log ciphertexts.

Text convention:
    "0x..."   hex, even number of plain hex digits, big-endian, reduced mod p
    anything  opaque UTF-8, right-padded / truncated to 32 bytes, reduced mod p

Byte conventions:
    32 bytes  plaintext content (one field per 32-byte chunk)
    31 bytes  ciphertext packing (leading byte dropped so any 31-byte
              payload fits one field without wraparound)
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from typing import Iterable, Union

# ==============================================================================
# BN254 scalar field
# ==============================================================================

FR_MODULUS = 0x30644E72E131A029B85045B68181585D2833E84879B9709143E1F593F0000001

FIELD_SIZE_IN_BYTES = 32
PACKED_FIELD_SIZE_IN_BYTES = 31

HEX_PREFIX = "0x"


class FieldError(ValueError):
    """Raised for text or bytes that cannot be converted to a field element."""
    pass


class InvalidHexDigits(FieldError):
    """Raised for 0x-prefixed text with an odd number of hex digits."""
    pass


# ==============================================================================
# Text classification
# ==============================================================================


@dataclass(frozen=True)
class HexText:
    """0x-prefixed text; `digits` excludes the prefix."""
    digits: str


@dataclass(frozen=True)
class Utf8Text:
    """Any other text, kept as its raw UTF-8 bytes."""
    data: bytes


FieldText = Union[HexText, Utf8Text]


def is_hex_digits(digits: str) -> bool:
    """True when every character is a hex digit (no sign, space or underscore)."""
    return all(c in string.hexdigits for c in digits)


def classify_field_text(value: str) -> FieldText:
    """Decide how a piece of text is interpreted, without parsing it."""
    if not isinstance(value, str):
        raise FieldError(f"Expected a string, got {type(value).__name__}: {value!r}")
    if value.startswith(HEX_PREFIX):
        return HexText(value[len(HEX_PREFIX):])
    return Utf8Text(value.encode("utf-8"))


def parse_field(value: str) -> int:
    """
    Convert text to a field element.

    Args:
        value: "0x"-prefixed even-length hex, or arbitrary UTF-8 text.

    Returns:
        int in [0, FR_MODULUS). Hex and padded UTF-8 values at or above the
        modulus are reduced.

    Raises:
        InvalidHexDigits: if the hex digit count is odd.
        FieldError: if the value is not a string or the hex digits are not
            plain hexadecimal.
    """
    text = classify_field_text(value)
    if isinstance(text, HexText):
        if not is_hex_digits(text.digits):
            raise FieldError(f"Invalid hex string: {value!r}")
        if len(text.digits) % 2 != 0:
            raise InvalidHexDigits(f"odd number of digits in {value!r}")
        if not text.digits:
            return 0
        return int(text.digits, 16) % FR_MODULUS

    padded = text.data[:FIELD_SIZE_IN_BYTES].ljust(FIELD_SIZE_IN_BYTES, b"\x00")
    return int.from_bytes(padded, "big") % FR_MODULUS


def normalize_address(address: str) -> str:
    """Left-pad a hex address to 64 digits, with or without a 0x prefix."""
    if not isinstance(address, str):
        raise FieldError(f"Expected an address string, got {type(address).__name__}")
    digits = address[len(HEX_PREFIX):] if address.startswith(HEX_PREFIX) else address
    return HEX_PREFIX + digits.rjust(64, "0")


def parse_address_field(address: str) -> int:
    """
    Parse a 0x-prefixed 64-digit address into its field value, unreduced.

    Raises:
        FieldError: if the text is not exactly 64 hex digits or the value is
            not below the field modulus.
    """
    if not isinstance(address, str) or not address.startswith(HEX_PREFIX):
        raise FieldError(f"Invalid address: {address!r}")
    digits = address[len(HEX_PREFIX):]
    if len(digits) != 64 or not is_hex_digits(digits):
        raise FieldError(f"Invalid address: {address!r}")
    value = int(digits, 16)
    if value >= FR_MODULUS:
        raise FieldError(f"Address {address} is not a field element")
    return value


# ==============================================================================
# Byte packing
# ==============================================================================


def to_field(value: int) -> int:
    """Reduce an arbitrary non-negative integer into the field."""
    if value < 0:
        raise FieldError(f"Field elements are non-negative, got {value}")
    return value % FR_MODULUS


def field_to_bytes32(value: int) -> bytes:
    """Serialize a field element as 32 bytes big-endian."""
    return to_field(value).to_bytes(FIELD_SIZE_IN_BYTES, "big")


def bytes32_to_field(data: bytes) -> int:
    """
    Read a big-endian field element from at most 32 bytes.

    Shorter inputs are treated as the low-order bytes, matching how a
    trailing partial chunk of plaintext is read back.
    """
    if len(data) > FIELD_SIZE_IN_BYTES:
        raise FieldError(f"Expected at most 32 bytes, got {len(data)}")
    return int.from_bytes(data, "big") % FR_MODULUS


def field_to_bytes31(value: int) -> bytes:
    """Serialize a field element and drop its leading byte (31-byte packing)."""
    return field_to_bytes32(value)[1:]


def fields_to_bytes31(fields: Iterable[int]) -> bytes:
    """Concatenate the 31-byte packing of each field element."""
    return b"".join(field_to_bytes31(f) for f in fields)


def bytes_to_fields32(data: bytes) -> list[int]:
    """Split bytes into 32-byte chunks, one field element per chunk."""
    return [
        bytes32_to_field(data[i:i + FIELD_SIZE_IN_BYTES])
        for i in range(0, len(data), FIELD_SIZE_IN_BYTES)
    ]


# ==============================================================================
# Helpers
# ==============================================================================


def field_to_hex(value: int) -> str:
    """Canonical 0x-prefixed, 64-digit hex representation."""
    return HEX_PREFIX + field_to_bytes32(value).hex()


def field_from_buffer(hex_str: str) -> int:
    """Parse a bare or 0x-prefixed hex buffer of up to 32 bytes."""
    if not isinstance(hex_str, str):
        raise FieldError(f"Expected a hex string, got {type(hex_str).__name__}")
    digits = hex_str[len(HEX_PREFIX):] if hex_str.startswith(HEX_PREFIX) else hex_str
    if not is_hex_digits(digits) or len(digits) % 2 != 0:
        raise FieldError(f"Invalid hex buffer: {hex_str!r}")
    return bytes32_to_field(bytes.fromhex(digits))


def random_field() -> int:
    return secrets.randbelow(FR_MODULUS)


def field_is_zero(value: str) -> bool:
    return parse_field(value) == 0


def field_equals(a: str, b: str) -> bool:
    return parse_field(a) == parse_field(b)
