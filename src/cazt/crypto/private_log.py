"""
Private log decryption.

Wire layout of a private log ciphertext (PRIVATE_LOG_CIPHERTEXT_LEN fields):

    field 0          ephemeral public key x-coordinate
    fields 1..       repacked as 31 bytes per field:
                       [0]        ephemeral public key sign (non-zero = positive y)
                       [1..17)    AES-128-CBC header ciphertext
                       [17..)     AES-128-CBC body ciphertext, zero padded

The decrypted header starts with the body ciphertext length as a big-endian
u16. The decrypted body is repacked into 32-byte field elements.

Key agreement:
    S = address_secret · EphPk                        (ECDH on Grumpkin)
    key_i = low16(H((i << 8) + SYMMETRIC_KEY;   S.x ‖ S.y))
    iv_i  = low16(H((i << 8) + SYMMETRIC_KEY_2; S.x ‖ S.y))
    header uses i = 1, body uses i = 0

Every failure after the input checks is reported as `DecryptionFailed`,
whatever its cause.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cazt.core.address import AddressError, CompleteAddress
from cazt.crypto.field import (
    FieldError,
    bytes_to_fields32,
    field_to_bytes32,
    field_to_hex,
    fields_to_bytes31,
    parse_field,
)
from cazt.crypto.grumpkin import CurveError, point_from_x_and_sign
from cazt.crypto.hashing import GeneratorIndex, hash_with_separator
from cazt.crypto.keys import (
    compute_address_secret,
    derive_ecdh_shared_secret,
    derive_master_incoming_viewing_secret_key,
)

logger = logging.getLogger("cazt.private_log")

PRIVATE_LOG_SIZE_IN_FIELDS = 18
PRIVATE_LOG_CIPHERTEXT_LEN = PRIVATE_LOG_SIZE_IN_FIELDS - 1

EPH_PK_X_SIZE_IN_FIELDS = 1
EPH_PK_SIGN_BYTE_SIZE_IN_BYTES = 1
HEADER_CIPHERTEXT_SIZE_IN_BYTES = 16
AES_BLOCK_SIZE_IN_BYTES = 16

HEADER_KEY_INDEX = 1
BODY_KEY_INDEX = 0


class PrivateLogError(ValueError):
    """Base class for private log decryption errors."""
    pass


class LengthMismatch(PrivateLogError):
    pass


class MissingParameter(PrivateLogError):
    pass


class DecryptionFailed(PrivateLogError):
    """The ciphertext could not be decrypted with the given credentials."""

    def __init__(self) -> None:
        super().__init__("Failed to decrypt private log")


@dataclass(frozen=True)
class SymmetricKey:
    key: bytes
    iv: bytes


def derive_aes_symmetric_key_and_iv(shared_secret_x: int, shared_secret_y: int, index: int) -> SymmetricKey:
    """
    Derive an AES-128 key and IV from the ECDH shared secret.

    The low 16 bytes of each 32-byte hash output are taken in reverse order
    (least significant byte first).
    """
    k_shift = index << 8
    inputs = [shared_secret_x, shared_secret_y]
    rand1 = field_to_bytes32(hash_with_separator(inputs, k_shift + GeneratorIndex.SYMMETRIC_KEY))
    rand2 = field_to_bytes32(hash_with_separator(inputs, k_shift + GeneratorIndex.SYMMETRIC_KEY_2))
    return SymmetricKey(key=rand1[16:][::-1], iv=rand2[16:][::-1])


def aes128_cbc_decrypt(data: bytes, key: SymmetricKey) -> bytes:
    """AES-128-CBC decryption followed by PKCS#7 unpadding."""
    decryptor = Cipher(algorithms.AES(key.key), modes.CBC(key.iv)).decryptor()
    padded = decryptor.update(data) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


def decrypt_private_log(
    ciphertext: Sequence[int],
    recipient: CompleteAddress | None,
    secret_key: int | None,
) -> list[int]:
    """
    Recover the plaintext fields of a private log addressed to `recipient`.

    Args:
        ciphertext: exactly PRIVATE_LOG_CIPHERTEXT_LEN field elements.
        recipient: the recipient's complete address.
        secret_key: the recipient's account secret key.

    Returns:
        The plaintext as a list of field elements.

    Raises:
        LengthMismatch: wrong number of ciphertext fields.
        MissingParameter: recipient or secret key missing.
        DecryptionFailed: any cryptographic failure.
    """
    if len(ciphertext) != PRIVATE_LOG_CIPHERTEXT_LEN:
        raise LengthMismatch(
            f"Ciphertext must be {PRIVATE_LOG_CIPHERTEXT_LEN} fields, got {len(ciphertext)}"
        )
    if recipient is None:
        raise MissingParameter("recipientAddress is required")
    if secret_key is None:
        raise MissingParameter("recipientSecretKey is required")

    try:
        return _decrypt(ciphertext, recipient, secret_key)
    except (CurveError, FieldError, ValueError) as e:
        logger.debug(f"Private log decryption failed: {type(e).__name__}")
        raise DecryptionFailed() from None


def _decrypt(ciphertext: Sequence[int], recipient: CompleteAddress, secret_key: int) -> list[int]:
    eph_pk_x = ciphertext[0]
    ciphertext_bytes = fields_to_bytes31(ciphertext[EPH_PK_X_SIZE_IN_FIELDS:])

    eph_pk_sign = ciphertext_bytes[0] != 0
    eph_pk = point_from_x_and_sign(eph_pk_x, eph_pk_sign)

    ivsk_m = derive_master_incoming_viewing_secret_key(secret_key)
    address_secret = compute_address_secret(recipient.get_preaddress(), ivsk_m)
    shared_secret = derive_ecdh_shared_secret(address_secret, eph_pk)
    sx, sy = shared_secret.x(), shared_secret.y()

    header_key = derive_aes_symmetric_key_and_iv(sx, sy, HEADER_KEY_INDEX)
    body_key = derive_aes_symmetric_key_and_iv(sx, sy, BODY_KEY_INDEX)

    header_start = EPH_PK_SIGN_BYTE_SIZE_IN_BYTES
    body_start = header_start + HEADER_CIPHERTEXT_SIZE_IN_BYTES
    header_plaintext = aes128_cbc_decrypt(ciphertext_bytes[header_start:body_start], header_key)
    if len(header_plaintext) < 2:
        raise ValueError("header too short")
    body_length = int.from_bytes(header_plaintext[:2], "big")

    body_with_padding = ciphertext_bytes[body_start:]
    if body_length == 0 or body_length > len(body_with_padding) or body_length % AES_BLOCK_SIZE_IN_BYTES:
        raise ValueError("invalid body length")
    plaintext = aes128_cbc_decrypt(body_with_padding[:body_length], body_key)
    return bytes_to_fields32(plaintext)


def decrypt_private_log_from_text(
    ciphertext: Sequence[str] | None,
    recipient_address: str | None,
    recipient_secret_key: str | None,
) -> list[str]:
    """Text-in / text-out wrapper used by the CLI and toolkit."""
    if ciphertext is None or isinstance(ciphertext, str):
        raise MissingParameter("ciphertext must be a JSON array")
    if len(ciphertext) != PRIVATE_LOG_CIPHERTEXT_LEN:
        raise LengthMismatch(
            f"Ciphertext must be {PRIVATE_LOG_CIPHERTEXT_LEN} fields, got {len(ciphertext)}"
        )
    fields = [parse_field(f) for f in ciphertext]
    if not recipient_address:
        raise MissingParameter("recipientAddress is required")
    if not recipient_secret_key:
        raise MissingParameter("recipientSecretKey is required")

    try:
        recipient = CompleteAddress.from_string(recipient_address)
    except AddressError:
        raise DecryptionFailed() from None
    plaintext = decrypt_private_log(fields, recipient, parse_field(recipient_secret_key))
    return [field_to_hex(f) for f in plaintext]
