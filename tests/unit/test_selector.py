"""
Unit tests for cazt.crypto.selector: function, event and note selectors.
"""

import pytest

from cazt.crypto.field import FieldError, field_to_bytes32
from cazt.crypto.hashing import hash_bytes
from cazt.crypto.selector import (
    SelectorError,
    note_selector_from_field,
    selector_from_field,
    selector_from_signature,
    selector_from_string,
    selector_to_hex,
)


class TestFromSignature:

    def test_low_four_bytes_of_hash(self):
        digest = field_to_bytes32(hash_bytes(b"transfer(Field,Field)"))
        assert selector_from_signature("transfer(Field,Field)") == int.from_bytes(digest[-4:], "big")

    def test_fits_four_bytes(self):
        assert 0 <= selector_from_signature("constructor()") < 1 << 32

    def test_signature_matters(self):
        assert selector_from_signature("a()") != selector_from_signature("b()")

    def test_empty_rejected(self):
        with pytest.raises(SelectorError):
            selector_from_signature("")


class TestFromValues:

    def test_from_field(self):
        assert selector_from_field(0xDEADBEEF) == 0xDEADBEEF

    def test_from_field_too_large(self):
        with pytest.raises(SelectorError):
            selector_from_field(1 << 32)

    def test_from_string(self):
        assert selector_from_string("0x0000abcd") == 0xABCD

    def test_from_string_short(self):
        assert selector_from_string("0x1") == 1

    @pytest.mark.parametrize("text", ["0x", "0x123456789", "0x-1", "0xzz"])
    def test_from_string_invalid(self, text):
        with pytest.raises(SelectorError):
            selector_from_string(text)

    def test_note_selector_bounds(self):
        assert note_selector_from_field(127) == 127
        with pytest.raises(SelectorError):
            note_selector_from_field(128)

    def test_selector_error_is_field_error(self):
        assert issubclass(SelectorError, FieldError)

    def test_to_hex(self):
        assert selector_to_hex(0xAB) == "0x000000ab"
