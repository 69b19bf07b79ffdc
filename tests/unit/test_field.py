"""
Unit tests for cazt.crypto.field: text and byte conversions of field elements.
"""

import pytest

from cazt.crypto.field import (
    FR_MODULUS,
    FieldError,
    HexText,
    InvalidHexDigits,
    Utf8Text,
    bytes32_to_field,
    bytes_to_fields32,
    classify_field_text,
    field_equals,
    field_from_buffer,
    field_is_zero,
    field_to_bytes31,
    field_to_bytes32,
    field_to_hex,
    fields_to_bytes31,
    is_hex_digits,
    normalize_address,
    parse_address_field,
    parse_field,
    random_field,
)


# ==============================================================================
# Text parsing
# ==============================================================================


class TestParseField:

    def test_hex(self):
        assert parse_field("0x0a") == 10

    def test_hex_uppercase_digits(self):
        assert parse_field("0xFF") == 255

    def test_empty_hex_is_zero(self):
        assert parse_field("0x") == 0

    def test_odd_digits_rejected(self):
        """An odd number of hex digits is an error, not a left-pad."""
        with pytest.raises(InvalidHexDigits):
            parse_field("0x123")

    def test_invalid_hex_digits(self):
        with pytest.raises(FieldError):
            parse_field("0xzz")

    def test_hex_reduced_mod_p(self):
        value = FR_MODULUS + 5
        assert parse_field(f"0x{value:064x}") == 5

    def test_modulus_is_zero(self):
        assert parse_field(f"0x{FR_MODULUS:064x}") == 0

    def test_utf8_short_text_right_padded(self):
        """'abc' → 0x616263 followed by 29 zero bytes, reduced because it exceeds p."""
        padded = int.from_bytes(b"abc" + b"\x00" * 29, "big")
        assert padded >= FR_MODULUS
        assert parse_field("abc") == padded % FR_MODULUS

    def test_utf8_below_modulus_unreduced(self):
        expected = int.from_bytes(b"\x01ab" + b"\x00" * 29, "big")
        assert parse_field("\x01ab") == expected

    def test_utf8_reduction_matches_hex_rule(self):
        padded = b"zz" + b"\x00" * 30
        assert parse_field("zz") == parse_field("0x" + padded.hex())

    @pytest.mark.parametrize("text", ["0x-1", "0x+1", "0x 1", "0x0_01", "0x-001", "0x\t01", "0x01 "])
    def test_non_hex_characters_rejected(self, text):
        """Signs, whitespace and underscores that int(..., 16) would accept are errors."""
        with pytest.raises(FieldError, match="Invalid hex string"):
            parse_field(text)

    @pytest.mark.parametrize("value", [1, 0x10, None, ["0x01"], b"0x01"])
    def test_non_string_rejected(self, value):
        with pytest.raises(FieldError, match="Expected a string"):
            parse_field(value)

    def test_utf8_long_text_truncated(self):
        long_text = "x" * 40
        assert parse_field(long_text) == parse_field("x" * 32)

    def test_utf8_result_in_field(self):
        assert parse_field("\xff" * 32) < FR_MODULUS

    def test_empty_string_is_zero(self):
        assert parse_field("") == 0

    def test_decimal_text_is_utf8_not_number(self):
        assert parse_field("10") != 10


class TestClassifyFieldText:

    def test_hex(self):
        assert classify_field_text("0xab") == HexText("ab")

    def test_utf8(self):
        assert classify_field_text("hello") == Utf8Text(b"hello")

    def test_bare_hex_is_utf8(self):
        assert isinstance(classify_field_text("abcd"), Utf8Text)


class TestNormalizeAddress:

    def test_short_address_padded(self):
        assert normalize_address("0x1") == "0x" + "0" * 63 + "1"

    def test_without_prefix(self):
        assert normalize_address("ab") == "0x" + "0" * 62 + "ab"

    def test_full_length_unchanged(self):
        addr = "0x" + "12" * 32
        assert normalize_address(addr) == addr

    def test_non_string_rejected(self):
        with pytest.raises(FieldError):
            normalize_address(0x1F)


class TestParseAddressField:

    def test_valid(self):
        assert parse_address_field("0x" + "0" * 62 + "1f") == 0x1F

    def test_too_long_rejected(self):
        """65 digits would otherwise be silently reduced."""
        with pytest.raises(FieldError):
            parse_address_field(normalize_address("0x1" + "0" * 64))

    def test_modulus_rejected(self):
        with pytest.raises(FieldError, match="not a field element"):
            parse_address_field(f"0x{FR_MODULUS:064x}")

    def test_just_below_modulus(self):
        assert parse_address_field(f"0x{FR_MODULUS - 1:064x}") == FR_MODULUS - 1

    def test_sign_rejected(self):
        with pytest.raises(FieldError):
            parse_address_field("0x-" + "0" * 62 + "1")

    def test_is_hex_digits(self):
        assert is_hex_digits("00aAfF09")
        assert is_hex_digits("")
        assert not is_hex_digits("0_1")
        assert not is_hex_digits("-1")


# ==============================================================================
# Byte packing
# ==============================================================================


class TestBytePacking:

    def test_field_to_bytes32(self):
        assert field_to_bytes32(1) == b"\x00" * 31 + b"\x01"

    def test_bytes32_to_field(self):
        assert bytes32_to_field(b"\x00" * 31 + b"\x02") == 2

    def test_bytes32_short_input_low_order(self):
        assert bytes32_to_field(b"\x01\x00") == 256

    def test_bytes32_too_long(self):
        with pytest.raises(FieldError):
            bytes32_to_field(b"\x00" * 33)

    def test_bytes31_drops_leading_byte(self):
        out = field_to_bytes31(0x0102)
        assert len(out) == 31
        assert out[-2:] == b"\x01\x02"

    def test_fields_to_bytes31_concatenates(self):
        assert len(fields_to_bytes31([1, 2, 3])) == 93

    def test_bytes31_of_packed_chunk_is_identity(self):
        """A 31-byte chunk read as a field packs back to the same bytes."""
        chunk = bytes(range(1, 32))
        assert field_to_bytes31(int.from_bytes(chunk, "big")) == chunk

    def test_bytes_to_fields32(self):
        data = field_to_bytes32(7) + field_to_bytes32(9)
        assert bytes_to_fields32(data) == [7, 9]

    def test_bytes_to_fields32_trailing_chunk(self):
        data = field_to_bytes32(7) + b"\x01"
        assert bytes_to_fields32(data) == [7, 1]


# ==============================================================================
# Helpers
# ==============================================================================


class TestHelpers:

    def test_field_to_hex_canonical(self):
        assert field_to_hex(10) == "0x" + "0" * 62 + "0a"

    def test_field_from_buffer_with_prefix(self):
        assert field_from_buffer("0x0a") == 10

    def test_field_from_buffer_bare(self):
        assert field_from_buffer("ff") == 255

    def test_field_from_buffer_invalid(self):
        with pytest.raises(FieldError):
            field_from_buffer("0xabc")

    def test_field_from_buffer_whitespace_rejected(self):
        with pytest.raises(FieldError):
            field_from_buffer("0a 0b")

    def test_random_field_in_range(self):
        for _ in range(10):
            assert 0 <= random_field() < FR_MODULUS

    def test_field_is_zero(self):
        assert field_is_zero("0x00")
        assert not field_is_zero("0x01")

    def test_field_equals_ignores_leading_zeros(self):
        assert field_equals("0x01", "0x0001")
