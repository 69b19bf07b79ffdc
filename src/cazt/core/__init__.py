"""core module init"""
from cazt.core.address import (
    AddressError,
    CompleteAddress,
    PublicKey,
    PublicKeys,
    is_address_string,
    is_valid_address,
    parse_address,
)
from cazt.core.config import Settings
from cazt.core.models import NoteVerification, TxEffect
from cazt.core.node import AztecNode, AztecNodeError
from cazt.core.storage import (
    StorageError,
    derive_note_slot,
    get_storage_layout,
    resolve_storage_slot,
)

__all__ = [
    "AddressError",
    "AztecNode",
    "AztecNodeError",
    "CompleteAddress",
    "NoteVerification",
    "PublicKey",
    "PublicKeys",
    "Settings",
    "StorageError",
    "TxEffect",
    "derive_note_slot",
    "get_storage_layout",
    "is_address_string",
    "is_valid_address",
    "parse_address",
    "resolve_storage_slot",
]
