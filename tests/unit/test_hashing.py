"""
Unit tests for cazt.crypto.hashing: domain-separated field hashing.
"""

import hashlib

import pytest

from cazt.crypto.field import FR_MODULUS, FieldError
from cazt.crypto.hashing import (
    Blake2bFieldHasher,
    FieldHasher,
    GeneratorIndex,
    data_to_bytes,
    derive_storage_slot_in_map,
    get_hasher,
    hash_bytes,
    hash_fields,
    hash_with_separator,
    keccak256,
    set_hasher,
    sha256_to_field,
)


class SumHasher(FieldHasher):
    """Transparent hasher so compositions can be checked by hand."""

    name = "sum"

    def hash(self, inputs):
        return sum(inputs) % FR_MODULUS


class TestGeneratorIndex:

    def test_values(self):
        assert GeneratorIndex.NOTE_HASH == 1
        assert GeneratorIndex.NOTE_HASH_NONCE == 2
        assert GeneratorIndex.UNIQUE_NOTE_HASH == 3
        assert GeneratorIndex.SILOED_NOTE_HASH == 4
        assert GeneratorIndex.MESSAGE_NULLIFIER == 5
        assert GeneratorIndex.OUTER_NULLIFIER == 7
        assert GeneratorIndex.PUBLIC_LEAF_INDEX == 23
        assert GeneratorIndex.SYMMETRIC_KEY == 57
        assert GeneratorIndex.SYMMETRIC_KEY_2 == 58

    def test_distinct(self):
        values = [g.value for g in GeneratorIndex]
        assert len(values) == len(set(values))


class TestBlake2bFieldHasher:

    def test_deterministic(self):
        h = Blake2bFieldHasher()
        assert h.hash([1, 2, 3]) == h.hash([1, 2, 3])

    def test_output_in_field(self):
        assert 0 <= Blake2bFieldHasher().hash([FR_MODULUS - 1]) < FR_MODULUS

    def test_order_matters(self):
        h = Blake2bFieldHasher()
        assert h.hash([1, 2]) != h.hash([2, 1])

    def test_length_matters(self):
        """Trailing zeros change the hash."""
        h = Blake2bFieldHasher()
        assert h.hash([1]) != h.hash([1, 0])

    def test_separator_is_prepended(self):
        h = Blake2bFieldHasher()
        assert h.hash_with_separator([5, 6], 9) == h.hash([9, 5, 6])

    def test_personalisation_changes_output(self):
        assert Blake2bFieldHasher(b"a").hash([1]) != Blake2bFieldHasher(b"b").hash([1])


class TestHasherSelection:

    def test_default_is_blake2b(self):
        assert get_hasher().name == "blake2b"

    def test_set_hasher_returns_previous(self):
        previous = set_hasher(SumHasher())
        try:
            assert isinstance(get_hasher(), SumHasher)
            assert hash_fields([1, 2]) == 3
            assert hash_with_separator([1, 2], 10) == 13
            assert derive_storage_slot_in_map(4, 5) == 9
        finally:
            set_hasher(previous)
        assert get_hasher() is previous

    def test_separators_domain_separate(self):
        assert hash_with_separator([1], GeneratorIndex.NOTE_HASH) != hash_with_separator(
            [1], GeneratorIndex.SILOED_NOTE_HASH
        )

    def test_map_slot_uses_no_separator(self):
        assert derive_storage_slot_in_map(4, 5) == get_hasher().hash([4, 5])


# ==============================================================================
# Byte hashes
# ==============================================================================


class TestDataToBytes:

    def test_hex(self):
        assert data_to_bytes("0x0aff") == b"\x0a\xff"

    def test_utf8(self):
        assert data_to_bytes("abc") == b"abc"

    def test_empty_hex(self):
        assert data_to_bytes("0x") == b""

    def test_odd_hex(self):
        with pytest.raises(FieldError, match="odd number of digits"):
            data_to_bytes("0xabc")

    def test_signed_hex(self):
        with pytest.raises(FieldError):
            data_to_bytes("0x-1")

    def test_non_string(self):
        with pytest.raises(FieldError):
            data_to_bytes(12)


class TestKeccakAndSha256:

    def test_keccak_empty(self):
        assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"

    def test_keccak_is_not_sha3(self):
        assert keccak256(b"") != hashlib.sha3_256(b"").digest()

    def test_sha256_to_field_truncates(self):
        digest = bytes.fromhex("ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad")
        assert sha256_to_field(b"abc") == int.from_bytes(digest[:31], "big")

    def test_sha256_to_field_in_field(self):
        assert sha256_to_field(b"\xff" * 100) < FR_MODULUS


class TestHashBytes:

    def test_chunks_of_31(self):
        data = bytes(range(40))
        expected = get_hasher().hash([int.from_bytes(data[:31], "big"), int.from_bytes(data[31:], "big")])
        assert hash_bytes(data) == expected

    def test_empty(self):
        assert hash_bytes(b"") == get_hasher().hash([])

    def test_distinct(self):
        assert hash_bytes(b"transfer(Field)") != hash_bytes(b"transfer(Field,Field)")

    def test_uses_active_hasher(self):
        previous = set_hasher(SumHasher())
        try:
            assert hash_bytes(b"\x01\x02") == 0x0102
        finally:
            set_hasher(previous)
