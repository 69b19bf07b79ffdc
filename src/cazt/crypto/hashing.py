"""
Field hashing with domain separation.

All protocol hashes in this package are of the form

    H(separator; x_1 ‖ ... ‖ x_n) = hash([separator, x_1, ..., x_n])

where `separator` is a `GeneratorIndex` value. Each pipeline stage uses its
own separator so that the inputs of one stage can never be replayed as the
inputs of another.

The hash function itself is a collaborator behind the `FieldHasher`
interface. `Blake2bFieldHasher` is the default backend; a Poseidon2 backend
matching a particular network can be installed with `set_hasher()`.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Sequence

from Crypto.Hash import keccak

from cazt.crypto.field import (
    FR_MODULUS,
    HEX_PREFIX,
    PACKED_FIELD_SIZE_IN_BYTES,
    FieldError,
    field_to_bytes32,
    is_hex_digits,
)


class GeneratorIndex(IntEnum):
    """Domain separators, one per hashing purpose."""
    NOTE_HASH = 1
    NOTE_HASH_NONCE = 2
    UNIQUE_NOTE_HASH = 3
    SILOED_NOTE_HASH = 4
    MESSAGE_NULLIFIER = 5
    OUTER_NULLIFIER = 7
    CONTRACT_ADDRESS_V1 = 15
    PUBLIC_LEAF_INDEX = 23
    SECRET_HASH = 26
    IVSK_M = 49
    PUBLIC_KEYS_HASH = 52
    SYMMETRIC_KEY = 57
    SYMMETRIC_KEY_2 = 58


class FieldHasher(ABC):
    """A hash from sequences of field elements to one field element."""

    name: str = "abstract"

    @abstractmethod
    def hash(self, inputs: Sequence[int]) -> int:
        """Hash a sequence of field elements."""

    def hash_with_separator(self, inputs: Sequence[int], separator: int) -> int:
        """Hash `inputs` with `separator` prepended as the first element."""
        return self.hash([separator, *inputs])


class Blake2bFieldHasher(FieldHasher):
    """
    Blake2b-256 over the 32-byte big-endian encoding of each input.

    The input count is mixed in first so sequences of different lengths
    never share an encoding. The digest is reduced mod p.
    """

    name = "blake2b"

    def __init__(self, person: bytes = b"cazt.field") -> None:
        self._person = person

    def hash(self, inputs: Sequence[int]) -> int:
        h = hashlib.blake2b(digest_size=32, person=self._person)
        h.update(len(inputs).to_bytes(8, "big"))
        for value in inputs:
            h.update(field_to_bytes32(value))
        return int.from_bytes(h.digest(), "big") % FR_MODULUS


_hasher: FieldHasher = Blake2bFieldHasher()


def get_hasher() -> FieldHasher:
    """Return the process-wide field hasher."""
    return _hasher


def set_hasher(hasher: FieldHasher) -> FieldHasher:
    """Install a new process-wide field hasher and return the previous one."""
    global _hasher
    previous = _hasher
    _hasher = hasher
    return previous


def hash_with_separator(inputs: Sequence[int], separator: int) -> int:
    return _hasher.hash_with_separator(inputs, separator)


def hash_fields(inputs: Sequence[int]) -> int:
    return _hasher.hash(inputs)


def derive_storage_slot_in_map(base_slot: int, key: int) -> int:
    """Storage slot of `map[key]` for a map declared at `base_slot`."""
    return _hasher.hash([base_slot, key])


# ==============================================================================
# Byte hashes
# ==============================================================================


def data_to_bytes(data: str) -> bytes:
    """
    Raw bytes of a hash input: 0x-prefixed hex, or the UTF-8 encoding of
    anything else.

    Raises:
        FieldError: for 0x-prefixed text that is not an even number of hex digits.
    """
    if not isinstance(data, str):
        raise FieldError(f"Expected a string, got {type(data).__name__}")
    if not data.startswith(HEX_PREFIX):
        return data.encode("utf-8")
    digits = data[len(HEX_PREFIX):]
    if not is_hex_digits(digits):
        raise FieldError(f"Invalid hex string: {data!r}")
    if len(digits) % 2 != 0:
        raise FieldError("odd number of digits")
    return bytes.fromhex(digits)


def hash_bytes(data: bytes) -> int:
    """
    Hash a byte string with the active field hasher.

    The bytes are split into 31-byte chunks, each read big-endian as one
    field element, so every chunk fits the field without reduction.
    """
    chunks = [
        int.from_bytes(data[i:i + PACKED_FIELD_SIZE_IN_BYTES], "big")
        for i in range(0, len(data), PACKED_FIELD_SIZE_IN_BYTES)
    ]
    return _hasher.hash(chunks)


def keccak256(data: bytes) -> bytes:
    """Keccak-256 (the pre-standard padding, not SHA3-256)."""
    return keccak.new(digest_bits=256, data=data).digest()


def sha256_to_field(data: bytes) -> int:
    """SHA-256 truncated to its first 31 bytes, so the result is always a field element."""
    return int.from_bytes(hashlib.sha256(data).digest()[:PACKED_FIELD_SIZE_IN_BYTES], "big")
