"""
Recipient key derivation for private log decryption.

    ivsk_m          = sha512(secret_key ‖ IVSK_M) mod N
    preaddress      = H(CONTRACT_ADDRESS_V1; public_keys_hash ‖ partial_address)
    address_secret  = ±(ivsk_m + preaddress)      sign chosen so that
                                                  address_secret·G has positive y
    shared_secret   = address_secret · ephemeral_public_key
"""

from __future__ import annotations

import hashlib

import ecdsa.ellipticcurve as ec

from cazt.crypto.field import field_to_bytes32
from cazt.crypto.grumpkin import GRUMPKIN_N, derive_public_key, is_positive
from cazt.crypto.hashing import GeneratorIndex, hash_with_separator


def sha512_to_grumpkin_scalar(secret: int, index: int) -> int:
    """Sha512 of secret (32 bytes) ‖ index (uint32 BE), reduced mod N."""
    data = field_to_bytes32(secret) + index.to_bytes(4, "big")
    return int.from_bytes(hashlib.sha512(data).digest(), "big") % GRUMPKIN_N


def derive_master_incoming_viewing_secret_key(secret_key: int) -> int:
    return sha512_to_grumpkin_scalar(secret_key, GeneratorIndex.IVSK_M)


def compute_preaddress(public_keys_hash: int, partial_address: int) -> int:
    return hash_with_separator(
        [public_keys_hash, partial_address], GeneratorIndex.CONTRACT_ADDRESS_V1
    )


def compute_address_secret(preaddress: int, ivsk_m: int) -> int:
    """
    Combine the incoming viewing key with the preaddress.

    Addresses are x-coordinates of points with positive y, so the candidate
    secret is negated when its public point has a negative y.
    """
    candidate = (ivsk_m + preaddress) % GRUMPKIN_N
    point = derive_public_key(candidate)
    if not is_positive(point.y()):
        return GRUMPKIN_N - candidate
    return candidate


def derive_ecdh_shared_secret(secret: int, public_key: ec.AbstractPoint) -> ec.AbstractPoint:
    return secret * public_key
