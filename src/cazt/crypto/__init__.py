"""
cazt.crypto: field codec, hashing and curve primitives.

Provides:
- BN254 scalar field text and byte conversions
- Domain-separated field hashing with a pluggable backend
- Grumpkin curve points and key derivation
- The raw / siloed / unique note hash pipeline

Private log decryption lives in `cazt.crypto.private_log`; it depends on
`cazt.core.address` and is not re-exported here.
"""

from cazt.crypto.field import FR_MODULUS, FieldError, InvalidHexDigits, field_to_hex, parse_field
from cazt.crypto.hashing import FieldHasher, GeneratorIndex, get_hasher, set_hasher
from cazt.crypto.note_hash import (
    FromItems,
    FromRaw,
    FromSiloed,
    NoteHashError,
    NoteHashes,
    compute_note_hash,
)

__all__ = [
    "FR_MODULUS",
    "FieldError",
    "FieldHasher",
    "FromItems",
    "FromRaw",
    "FromSiloed",
    "GeneratorIndex",
    "InvalidHexDigits",
    "NoteHashError",
    "NoteHashes",
    "compute_note_hash",
    "field_to_hex",
    "get_hasher",
    "parse_field",
    "set_hasher",
]
