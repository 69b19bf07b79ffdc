"""
CaztToolkit: one entry point for every cazt operation.

Wraps the note hash pipeline, private log decryption, storage slot helpers
and node queries behind plain methods that take and return JSON-friendly
values (0x-prefixed hex strings, lists, dicts).

Usage:
    from cazt.tools import CaztToolkit

    toolkit = CaztToolkit()
    toolkit.compute_note_hash(note_items=["0x01", "0x02"], storage_slot="0x07")
    toolkit.execute_tool("compute_note_hash", {"noteItems": ["0x01"], "storageSlot": "0x07"})
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cazt.core.address import (
    address_to_point,
    parse_address,
    random_address,
    validate_address,
)
from cazt.core.models import NoteVerification
from cazt.core.node import AztecNode
from cazt.core.storage import derive_note_slot, get_storage_layout
from cazt.crypto.field import (
    field_equals,
    field_from_buffer,
    field_is_zero,
    field_to_bytes32,
    field_to_hex,
    normalize_address,
    parse_field,
    random_field,
)
from cazt.crypto.hashing import (
    data_to_bytes,
    get_hasher,
    hash_fields,
    keccak256,
    sha256_to_field,
)
from cazt.crypto.note_hash import (
    compute_l1_to_l2_message_nullifier,
    compute_note_hash_from_params,
    compute_note_hash_nonce,
    compute_public_data_slot,
    compute_raw_note_hash,
    compute_secret_hash,
    compute_unique_note_hash,
    silo_note_hash,
    silo_nullifier,
    silo_private_log,
)
from cazt.crypto.private_log import decrypt_private_log_from_text
from cazt.crypto.selector import (
    note_selector_from_field,
    selector_from_field,
    selector_from_signature,
    selector_from_string,
    selector_to_hex,
)

logger = logging.getLogger("cazt.toolkit")


class CaztToolkit:
    """
    Unified access to cazt operations.

    Pure computations never touch the network. Only `verify_note` and the
    node helpers need a node; it is created on first use unless one is
    passed in.
    """

    def __init__(self, node: AztecNode | None = None, rpc_url: str | None = None) -> None:
        self._node = node
        self._rpc_url = rpc_url

    @property
    def node(self) -> AztecNode:
        if self._node is None:
            self._node = AztecNode(rpc_url=self._rpc_url)
        return self._node

    # ------------------------------------------------------------------
    # Note hashes
    # ------------------------------------------------------------------

    def compute_note_hash(
        self,
        raw_note_hash: str | None = None,
        siloed_note_hash: str | None = None,
        note_items: list[str] | None = None,
        storage_slot: str | None = None,
        partial: bool = False,
        contract_address: str | None = None,
        note_nonce: str | None = None,
    ) -> str | dict[str, str]:
        """
        Compute raw / siloed / unique note hashes.

        Returns:
            hex str when only the raw hash applies, otherwise a dict with the
            keys rawNoteHash, siloedNoteHash, uniqueNoteHash that were computed.
        """
        params: dict[str, Any] = {
            "rawNoteHash": raw_note_hash,
            "siloedNoteHash": siloed_note_hash,
            "noteItems": note_items,
            "storageSlot": storage_slot,
            "partial": partial,
            "contractAddress": contract_address,
            "noteNonce": note_nonce,
        }
        return compute_note_hash_from_params(params)

    def silo_note_hash(self, contract: str, note_hash: str) -> str:
        return field_to_hex(silo_note_hash(_address(contract), parse_field(note_hash)))

    def unique_note_hash(self, nonce: str, siloed_note_hash: str) -> str:
        return field_to_hex(compute_unique_note_hash(parse_field(nonce), parse_field(siloed_note_hash)))

    def note_hash_nonce(self, first_nullifier: str, note_index: int) -> str:
        return field_to_hex(compute_note_hash_nonce(parse_field(first_nullifier), int(note_index)))

    def silo_nullifier(self, contract: str, nullifier: str) -> str:
        return field_to_hex(silo_nullifier(_address(contract), parse_field(nullifier)))

    def secret_hash(self, secret: str) -> str:
        return field_to_hex(compute_secret_hash(parse_field(secret)))

    def silo_private_log(self, contract: str, tag: str) -> str:
        return field_to_hex(silo_private_log(_address(contract), parse_field(tag)))

    def public_data_slot(self, contract: str, slot: str) -> str:
        return field_to_hex(compute_public_data_slot(_address(contract), parse_field(slot)))

    def l1_to_l2_message_nullifier(self, contract: str, message_hash: str, secret: str) -> str:
        return field_to_hex(compute_l1_to_l2_message_nullifier(
            _address(contract), parse_field(message_hash), parse_field(secret)
        ))

    def hash(self, fields: list[str]) -> str:
        """Hash field elements with the active hasher, no separator."""
        if fields is None or isinstance(fields, str):
            raise ValueError("fields must be a JSON array")
        return field_to_hex(hash_fields([parse_field(f) for f in fields]))

    def keccak(self, data: str) -> str:
        """Keccak-256 of hex or UTF-8 input, as bare hex."""
        return keccak256(data_to_bytes(data)).hex()

    def sha256(self, data: str) -> str:
        return field_to_hex(sha256_to_field(data_to_bytes(data)))

    # ------------------------------------------------------------------
    # Selectors
    # ------------------------------------------------------------------

    def function_selector(self, signature: str) -> str:
        return selector_to_hex(selector_from_signature(signature))

    def event_selector(self, signature: str) -> str:
        return selector_to_hex(selector_from_signature(signature))

    def note_selector(self, value: str) -> str:
        return selector_to_hex(note_selector_from_field(parse_field(value)))

    def selector_from_field(self, value: str) -> str:
        return selector_to_hex(selector_from_field(parse_field(value)))

    def selector_from_string(self, value: str) -> str:
        return selector_to_hex(selector_from_string(value))

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify_note(
        self,
        tx_hash: str,
        note_hash: str | None = None,
        note_items: list[str] | None = None,
        storage_slot: str | None = None,
        contract_address: str | None = None,
        first_nullifier: str | None = None,
        note_index: int | None = None,
    ) -> dict[str, Any]:
        """
        Check whether a note was committed by a transaction.

        The base hash is either `note_hash` or computed from `note_items` and
        `storage_slot`. It is siloed when a contract is given. With a note
        index the unique hash is compared; the nonce uses `first_nullifier`
        or, if absent, the transaction's own first nullifier. Without a note
        index the siloed hash is compared directly.
        """
        contract = _address(contract_address) if contract_address else None

        if note_hash:
            base = parse_field(note_hash)
        else:
            if not contract_address:
                raise ValueError("contractAddress is required when computing hash from note items")
            if note_items is None:
                raise ValueError("noteItems are required when noteHash is not given")
            if storage_slot is None:
                raise ValueError("storageSlot is required when computing hash from note items")
            base = compute_raw_note_hash(
                [parse_field(i) for i in note_items], parse_field(storage_slot)
            )

        siloed = silo_note_hash(contract, base) if contract is not None else base

        effect = self.node.get_tx_effect(tx_hash)
        committed = {parse_field(h) for h in effect.note_hashes}

        unique_hex: str | None = None
        if note_index is not None:
            nullifier_text = first_nullifier or effect.first_nullifier
            if nullifier_text is None:
                raise ValueError(f"Transaction {tx_hash} has no nullifiers; pass firstNullifier")
            nonce = compute_note_hash_nonce(parse_field(nullifier_text), int(note_index))
            unique = compute_unique_note_hash(nonce, siloed)
            unique_hex = field_to_hex(unique)
            exists = unique in committed
        else:
            exists = siloed in committed

        logger.info(f"Note {'found' if exists else 'not found'} in tx {tx_hash}")
        return NoteVerification(
            exists=exists,
            base_note_hash=field_to_hex(base),
            siloed_hash=field_to_hex(siloed),
            unique_hash=unique_hex,
            note_hashes=effect.note_hashes,
            first_nullifier=effect.first_nullifier,
        ).to_output()

    # ------------------------------------------------------------------
    # Private logs
    # ------------------------------------------------------------------

    def decrypt_private_log(
        self,
        ciphertext: list[str],
        recipient_address: str,
        recipient_secret_key: str,
    ) -> list[str]:
        """Decrypt a raw private log; returns the plaintext fields as hex."""
        return decrypt_private_log_from_text(ciphertext, recipient_address, recipient_secret_key)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def derive_note_slot(self, base_slot: str, key: str) -> str:
        return field_to_hex(derive_note_slot(base_slot, key))

    def storage_layout(self, artifact: dict[str, Any]) -> dict[str, Any]:
        return {
            "artifactName": artifact.get("name"),
            "storageLayout": get_storage_layout(artifact),
        }

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def field_from_string(self, value: str) -> str:
        return field_to_hex(parse_field(value))

    def field_to_buffer(self, value: str) -> str:
        return field_to_bytes32(parse_field(value)).hex()

    def field_from_buffer(self, value: str) -> str:
        return field_to_hex(field_from_buffer(value))

    def field_to_bigint(self, value: str) -> str:
        return str(parse_field(value))

    def field_to_string(self, value: str) -> str:
        return field_to_hex(parse_field(value))

    def field_random(self) -> str:
        return field_to_hex(random_field())

    def field_is_zero(self, value: str) -> bool:
        return field_is_zero(value)

    def field_equals(self, a: str, b: str) -> bool:
        return field_equals(a, b)

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def address_zero(self) -> str:
        return field_to_hex(0)

    def address_random(self) -> str:
        return field_to_hex(random_address())

    def address_validate(self, address: str) -> dict[str, Any]:
        return validate_address(address)

    def address_to_point(self, address: str) -> dict[str, str]:
        return address_to_point(_address(address))

    def address_from_field(self, value: str) -> str:
        return field_to_hex(parse_field(value))

    # ------------------------------------------------------------------
    # Node queries
    # ------------------------------------------------------------------

    def tx_receipt(self, tx_hash: str) -> dict[str, Any]:
        return self.node.get_tx_receipt(tx_hash)

    def private_logs(self, from_block: int, limit: int) -> list[Any]:
        return self.node.get_private_logs(int(from_block), int(limit))

    def chain_id(self) -> int:
        return self.node.get_chain_id()

    def node_version(self) -> int:
        return self.node.get_version()

    @property
    def hasher_name(self) -> str:
        """Name of the field hash backend every hash above goes through."""
        return get_hasher().name

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def execute_tool(self, tool_name: str, tool_input: dict[str, Any]) -> str:
        """
        Execute an operation by name with camelCase JSON inputs.

        Returns:
            str: JSON-encoded result, or {"error": ...} on failure
        """
        tool_map = {
            "compute_note_hash": lambda i: compute_note_hash_from_params(i),
            "decrypt_private_log": lambda i: self.decrypt_private_log(
                i.get("ciphertext"), i.get("recipientAddress"), i.get("recipientSecretKey")
            ),
            "verify_note": lambda i: self.verify_note(
                tx_hash=i["txHash"],
                note_hash=i.get("noteHash"),
                note_items=i.get("noteItems"),
                storage_slot=i.get("storageSlot"),
                contract_address=i.get("contractAddress"),
                first_nullifier=i.get("firstNullifier"),
                note_index=i.get("noteIndex"),
            ),
            "derive_note_slot": lambda i: self.derive_note_slot(i["baseSlot"], i["key"]),
            "storage_layout": lambda i: self.storage_layout(i["artifact"]),
            "silo_note_hash": lambda i: self.silo_note_hash(i["contract"], i["noteHash"]),
            "unique_note_hash": lambda i: self.unique_note_hash(i["nonce"], i["siloedNoteHash"]),
            "note_hash_nonce": lambda i: self.note_hash_nonce(i["firstNullifier"], i["noteIndex"]),
            "silo_nullifier": lambda i: self.silo_nullifier(i["contract"], i["nullifier"]),
            "secret_hash": lambda i: self.secret_hash(i["secret"]),
            "field_from_string": lambda i: self.field_from_string(i["value"]),
            "field_to_string": lambda i: self.field_to_string(i["value"]),
            "field_is_zero": lambda i: self.field_is_zero(i["value"]),
            "field_equals": lambda i: self.field_equals(i["a"], i["b"]),
            "silo_private_log": lambda i: self.silo_private_log(i["contract"], i["tag"]),
            "public_data_slot": lambda i: self.public_data_slot(i["contract"], i["slot"]),
            "l1_to_l2_message_nullifier": lambda i: self.l1_to_l2_message_nullifier(
                i["contract"], i["messageHash"], i["secret"]
            ),
            "hash": lambda i: self.hash(i.get("fields")),
            "keccak": lambda i: self.keccak(i["data"]),
            "sha256": lambda i: self.sha256(i["data"]),
            "function_selector": lambda i: self.function_selector(i["signature"]),
            "event_selector": lambda i: self.event_selector(i["signature"]),
            "address_validate": lambda i: self.address_validate(i["address"]),
            "address_to_point": lambda i: self.address_to_point(i["address"]),
            "tx_receipt": lambda i: self.tx_receipt(i["txHash"]),
            "private_logs": lambda i: self.private_logs(i["fromBlock"], i["limit"]),
        }

        fn = tool_map.get(tool_name)
        if not fn:
            return json.dumps({"error": f"Unknown tool: {tool_name}"})

        try:
            result = fn(tool_input)
            return json.dumps(result, indent=2)
        except Exception as e:
            logger.error(f"Tool {tool_name} failed: {e}")
            return json.dumps({"error": type(e).__name__, "message": str(e)})

    def close(self) -> None:
        if self._node is not None:
            self._node.close()


def _address(value: str) -> int:
    return parse_address(normalize_address(value))
