"""
Aztec address utilities: complete address parsing and public key hashing.

An address is a single field element (the x-coordinate of the address point).
A *complete* address additionally carries everything needed to re-derive it:

    address (32) ‖ npk_m (64) ‖ ivpk_m (64) ‖ ovpk_m (64) ‖ tpk_m (64) ‖ partial_address (32)

Each public key is serialized as x ‖ y, 32 bytes each, big-endian. A key of
all zero bytes is the point at infinity. The complete address is exchanged
as a 0x-prefixed hex string of 640 digits.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cazt.crypto.field import (
    FIELD_SIZE_IN_BYTES,
    FR_MODULUS,
    FieldError,
    field_to_hex,
    is_hex_digits,
    normalize_address,
    parse_address_field,
    random_field,
)
from cazt.crypto.grumpkin import CurveError, point_from_coordinates, point_from_x_and_sign, y_from_x
from cazt.crypto.hashing import GeneratorIndex, hash_with_separator
from cazt.crypto.keys import compute_preaddress

POINT_SIZE_IN_BYTES = 2 * FIELD_SIZE_IN_BYTES
PUBLIC_KEYS_SIZE_IN_BYTES = 4 * POINT_SIZE_IN_BYTES
COMPLETE_ADDRESS_SIZE_IN_BYTES = 2 * FIELD_SIZE_IN_BYTES + PUBLIC_KEYS_SIZE_IN_BYTES


class AddressError(Exception):
    """Raised for malformed addresses."""

    pass


@dataclass(frozen=True)
class PublicKey:
    """An affine Grumpkin point as transmitted in a complete address."""
    x: int
    y: int

    @property
    def is_infinite(self) -> bool:
        return self.x == 0 and self.y == 0

    def to_fields(self) -> list[int]:
        return [self.x, self.y, int(self.is_infinite)]


@dataclass(frozen=True)
class PublicKeys:
    """The four master public keys of an account."""
    npk_m: PublicKey
    ivpk_m: PublicKey
    ovpk_m: PublicKey
    tpk_m: PublicKey

    def is_empty(self) -> bool:
        return all(k.is_infinite for k in (self.npk_m, self.ivpk_m, self.ovpk_m, self.tpk_m))

    def hash(self) -> int:
        if self.is_empty():
            return 0
        fields: list[int] = []
        for key in (self.npk_m, self.ivpk_m, self.ovpk_m, self.tpk_m):
            fields.extend(key.to_fields())
        return hash_with_separator(fields, GeneratorIndex.PUBLIC_KEYS_HASH)


@dataclass(frozen=True)
class CompleteAddress:
    """An address together with its public keys and partial address."""
    address: int
    public_keys: PublicKeys
    partial_address: int

    @classmethod
    def from_string(cls, value: str) -> CompleteAddress:
        """
        Parse a hex-encoded complete address.

        Raises:
            AddressError: if the hex is malformed, has the wrong length, or
                contains a public key that is not on the curve.
        """
        digits = value[2:] if value.startswith("0x") else value
        if not is_hex_digits(digits) or len(digits) % 2 != 0:
            raise AddressError("Complete address is not valid hex")
        raw = bytes.fromhex(digits)
        if len(raw) != COMPLETE_ADDRESS_SIZE_IN_BYTES:
            raise AddressError(
                f"Complete address must be {COMPLETE_ADDRESS_SIZE_IN_BYTES} bytes, got {len(raw)}"
            )

        reader = _Reader(raw)
        address = reader.field()
        keys = [reader.public_key() for _ in range(4)]
        partial_address = reader.field()
        return cls(
            address=address,
            public_keys=PublicKeys(*keys),
            partial_address=partial_address,
        )

    def get_preaddress(self) -> int:
        return compute_preaddress(self.public_keys.hash(), self.partial_address)

    def __str__(self) -> str:
        parts = [field_to_hex(self.address)[2:]]
        for key in (
            self.public_keys.npk_m,
            self.public_keys.ivpk_m,
            self.public_keys.ovpk_m,
            self.public_keys.tpk_m,
        ):
            parts.append(field_to_hex(key.x)[2:] + field_to_hex(key.y)[2:])
        parts.append(field_to_hex(self.partial_address)[2:])
        return "0x" + "".join(parts)


def parse_address(value: str) -> int:
    """
    Parse a 0x-prefixed 32-byte address into its field value.

    Raises:
        AddressError: if the string is not exactly 64 hex digits or the value
            is not a field element.
    """
    try:
        return parse_address_field(value)
    except FieldError as e:
        raise AddressError(str(e)) from None


def is_address_string(value: str) -> bool:
    """Check the 0x + 64 hex digit shape without raising."""
    return (
        isinstance(value, str)
        and value.startswith("0x")
        and len(value) == 66
        and is_hex_digits(value[2:])
    )


def is_valid_address(value: str) -> bool:
    try:
        parse_address(value)
        return True
    except AddressError:
        return False


def validate_address(value: str) -> dict[str, Any]:
    """
    Check an address and report the outcome instead of raising.

    Short addresses are left-padded first. Returns {"valid": True, "address"}
    with the canonical form, or {"valid": False, "error"}.
    """
    try:
        address = parse_address(normalize_address(value))
    except (AddressError, FieldError) as e:
        return {"valid": False, "error": str(e)}
    return {"valid": True, "address": field_to_hex(address)}


def address_to_point(address: int) -> dict[str, str]:
    """
    The address point: x is the address, y is the positive root.

    Raises:
        AddressError: if no curve point has this x-coordinate.
    """
    try:
        pt = point_from_x_and_sign(address, True)
    except CurveError as e:
        raise AddressError(f"Address is not a point on the curve: {e}") from None
    return {"x": field_to_hex(pt.x()), "y": field_to_hex(pt.y())}


def random_address() -> int:
    """A random field element that is the x-coordinate of a curve point."""
    while True:
        candidate = random_field()
        if y_from_x(candidate) is not None:
            return candidate


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    def field(self) -> int:
        chunk = self._data[self._offset:self._offset + FIELD_SIZE_IN_BYTES]
        self._offset += FIELD_SIZE_IN_BYTES
        value = int.from_bytes(chunk, "big")
        if value >= FR_MODULUS:
            raise AddressError(f"Value 0x{value:064x} is not a field element")
        return value

    def public_key(self) -> PublicKey:
        x, y = self.field(), self.field()
        try:
            point_from_coordinates(x, y)
        except CurveError as e:
            raise AddressError(f"Invalid public key: {e}") from None
        return PublicKey(x, y)
