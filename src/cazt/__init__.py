"""
cazt: Aztec note hashing, private log decryption and node tooling.

Usage:
    from cazt import AztecNode, compute_note_hash, decrypt_private_log
    from cazt.tools import CaztToolkit
"""

from cazt.core.address import CompleteAddress
from cazt.core.node import AztecNode
from cazt.crypto.field import parse_field
from cazt.crypto.note_hash import compute_note_hash
from cazt.crypto.private_log import decrypt_private_log

__version__ = "0.1.0"
__all__ = [
    "AztecNode",
    "CompleteAddress",
    "compute_note_hash",
    "decrypt_private_log",
    "parse_field",
]
