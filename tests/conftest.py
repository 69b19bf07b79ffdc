"""
Shared fixtures: a recipient account and a private log encrypted to it.

The encryption side mirrors what a sender does, so decryption tests can run
without any captured network data.
"""

from dataclasses import dataclass

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cazt.core.address import CompleteAddress, PublicKey, PublicKeys
from cazt.crypto.field import field_to_bytes32, field_to_hex
from cazt.crypto.grumpkin import derive_public_key, is_positive
from cazt.crypto.keys import compute_address_secret, derive_master_incoming_viewing_secret_key
from cazt.crypto.private_log import (
    BODY_KEY_INDEX,
    HEADER_KEY_INDEX,
    PRIVATE_LOG_CIPHERTEXT_LEN,
    SymmetricKey,
    derive_aes_symmetric_key_and_iv,
)


@dataclass
class Account:
    secret_key: int
    complete_address: CompleteAddress
    address_secret: int


def _public_key(secret: int) -> PublicKey:
    pt = derive_public_key(secret)
    return PublicKey(pt.x(), pt.y())


def make_account(secret_key: int, partial_address: int = 0x1234) -> Account:
    ivsk_m = derive_master_incoming_viewing_secret_key(secret_key)
    keys = PublicKeys(
        npk_m=_public_key(secret_key + 1),
        ivpk_m=_public_key(ivsk_m),
        ovpk_m=_public_key(secret_key + 2),
        tpk_m=_public_key(secret_key + 3),
    )
    draft = CompleteAddress(address=0, public_keys=keys, partial_address=partial_address)
    address_secret = compute_address_secret(draft.get_preaddress(), ivsk_m)
    address = derive_public_key(address_secret).x()
    complete = CompleteAddress(address=address, public_keys=keys, partial_address=partial_address)
    return Account(secret_key, complete, address_secret)


def _aes_encrypt(data: bytes, key: SymmetricKey) -> bytes:
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key.key), modes.CBC(key.iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def encrypt_private_log(plaintext: list[int], account: Account, eph_secret: int) -> list[int]:
    """Encrypt `plaintext` fields to `account` the way a sender does."""
    eph_pk = derive_public_key(eph_secret)
    address_point = derive_public_key(account.address_secret)
    shared = eph_secret * address_point
    sx, sy = shared.x(), shared.y()

    body_ct = _aes_encrypt(
        b"".join(field_to_bytes32(f) for f in plaintext),
        derive_aes_symmetric_key_and_iv(sx, sy, BODY_KEY_INDEX),
    )
    header_ct = _aes_encrypt(
        len(body_ct).to_bytes(2, "big"),
        derive_aes_symmetric_key_and_iv(sx, sy, HEADER_KEY_INDEX),
    )
    sign = b"\x01" if is_positive(eph_pk.y()) else b"\x00"

    packed_len = (PRIVATE_LOG_CIPHERTEXT_LEN - 1) * 31
    payload = (sign + header_ct + body_ct).ljust(packed_len, b"\x00")
    chunks = [payload[i:i + 31] for i in range(0, packed_len, 31)]
    return [eph_pk.x()] + [int.from_bytes(c, "big") for c in chunks]


@pytest.fixture
def account() -> Account:
    return make_account(0x2A2A2A)


@pytest.fixture
def plaintext() -> list[int]:
    return [0x0B, 0xDEADBEEF, 0x1234567890ABCDEF]


@pytest.fixture
def ciphertext(account, plaintext) -> list[int]:
    return encrypt_private_log(plaintext, account, eph_secret=0x777)


@pytest.fixture
def ciphertext_hex(ciphertext) -> list[str]:
    return [field_to_hex(f) for f in ciphertext]


@pytest.fixture
def encrypt_log():
    return encrypt_private_log


@pytest.fixture
def account_factory():
    return make_account
