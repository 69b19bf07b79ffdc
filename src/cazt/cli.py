"""
cazt command line.

    cazt notes compute-hash --note-items 0x01,0x02 --storage-slot 0x07
    cazt notes verify 0xTX --note-hash 0x... --contract-address 0x... --note-index 0
    cazt decrypt-private-log --ciphertext @log.json --recipient-address 0x... --recipient-secret-key 0x...
    cazt note-slot 0x05 0xADDRESS
    cazt block number --rpc-url devnet
    cazt sig "transfer(Field,Field)"
    cazt hash 0x01,0x02

List inputs accept comma-separated values, a JSON array, or @path to a JSON file.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx

from cazt import __version__
from cazt.core.address import AddressError
from cazt.core.config import Settings
from cazt.core.node import AztecNode, AztecNodeError
from cazt.core.storage import StorageError
from cazt.crypto.hashing import get_hasher
from cazt.tools.toolkit import CaztToolkit

logger = logging.getLogger("cazt.cli")

# Errors reported as a one-line message; anything else is a bug and propagates.
CLI_ERRORS = (ValueError, AddressError, StorageError, AztecNodeError, httpx.HTTPError, OSError)


def parse_list(value: str) -> list[Any]:
    """Parse `a,b,c`, a JSON array, or `@file.json` into a list."""
    text = value.strip()
    if text.startswith("@"):
        text = Path(text[1:]).read_text(encoding="utf-8").strip()
    if text.startswith("["):
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError("expected a JSON array")
        return data
    return [item.strip() for item in text.split(",") if item.strip()]


def load_json(value: str) -> Any:
    """Parse inline JSON or `@file.json`."""
    if value.startswith("@"):
        return json.loads(Path(value[1:]).read_text(encoding="utf-8"))
    return json.loads(value)


# ==============================================================================
# Command handlers
# ==============================================================================


def _cmd_compute_hash(args: argparse.Namespace, toolkit: CaztToolkit) -> Any:
    return toolkit.compute_note_hash(
        raw_note_hash=args.raw_note_hash,
        siloed_note_hash=args.siloed_note_hash,
        note_items=parse_list(args.note_items) if args.note_items is not None else None,
        storage_slot=args.storage_slot,
        partial=args.partial,
        contract_address=args.contract_address,
        note_nonce=args.note_nonce,
    )


def _cmd_verify(args: argparse.Namespace, toolkit: CaztToolkit) -> Any:
    return toolkit.verify_note(
        tx_hash=args.tx_hash,
        note_hash=args.note_hash,
        note_items=parse_list(args.note_items) if args.note_items is not None else None,
        storage_slot=args.storage_slot,
        contract_address=args.contract_address,
        first_nullifier=args.first_nullifier,
        note_index=args.note_index,
    )


def _cmd_decrypt(args: argparse.Namespace, toolkit: CaztToolkit) -> Any:
    return toolkit.decrypt_private_log(
        parse_list(args.ciphertext), args.recipient_address, args.recipient_secret_key
    )


def _cmd_storage_layout(args: argparse.Namespace, toolkit: CaztToolkit) -> Any:
    return toolkit.storage_layout(load_json(args.artifact))


def _cmd_raw(args: argparse.Namespace, toolkit: CaztToolkit) -> Any:
    params = load_json(args.params) if args.params else []
    if not isinstance(params, list):
        params = [params]
    return toolkit.node.call(args.method, params)


def _cmd_tx_effect(args: argparse.Namespace, toolkit: CaztToolkit) -> Any:
    effect = toolkit.node.get_tx_effect(args.tx_hash)
    return {
        "txHash": effect.tx_hash,
        "blockNumber": effect.block_number,
        "noteHashes": effect.note_hashes,
        "nullifiers": effect.nullifiers,
        "privateLogs": effect.private_logs,
    }


HANDLERS = {
    "compute-hash": _cmd_compute_hash,
    "verify": _cmd_verify,
    "decrypt-private-log": _cmd_decrypt,
    "note-slot": lambda a, t: t.derive_note_slot(a.base_slot, a.key),
    "storage-layout": _cmd_storage_layout,
    "field-from-string": lambda a, t: t.field_from_string(a.value),
    "field-to-buffer": lambda a, t: t.field_to_buffer(a.value),
    "silo-note-hash": lambda a, t: t.silo_note_hash(a.contract, a.note_hash),
    "unique-note-hash": lambda a, t: t.unique_note_hash(a.nonce, a.siloed_note_hash),
    "note-hash-nonce": lambda a, t: t.note_hash_nonce(a.first_nullifier, a.note_index),
    "silo-nullifier": lambda a, t: t.silo_nullifier(a.contract, a.nullifier),
    "secret-hash": lambda a, t: t.secret_hash(a.secret),
    "silo-private-log": lambda a, t: t.silo_private_log(a.contract, a.tag),
    "public-data-slot": lambda a, t: t.public_data_slot(a.contract, a.slot),
    "l1-to-l2-message-nullifier": lambda a, t: t.l1_to_l2_message_nullifier(a.contract, a.message_hash, a.secret),
    "hash": lambda a, t: t.hash(parse_list(a.fields)),
    "keccak": lambda a, t: t.keccak(a.data),
    "sha256": lambda a, t: t.sha256(a.data),
    "sig": lambda a, t: t.function_selector(a.signature),
    "event-selector": lambda a, t: t.event_selector(a.signature),
    "note-selector": lambda a, t: t.note_selector(a.value),
    "selector-from-field": lambda a, t: t.selector_from_field(a.value),
    "selector-from-string": lambda a, t: t.selector_from_string(a.value),
    "field-to-string": lambda a, t: t.field_to_string(a.value),
    "field-from-buffer": lambda a, t: t.field_from_buffer(a.value),
    "field-to-bigint": lambda a, t: t.field_to_bigint(a.value),
    "field-random": lambda a, t: t.field_random(),
    "field-is-zero": lambda a, t: t.field_is_zero(a.value),
    "field-equals": lambda a, t: t.field_equals(a.a, a.b),
    "address-zero": lambda a, t: t.address_zero(),
    "address-random": lambda a, t: t.address_random(),
    "address-validate": lambda a, t: t.address_validate(a.address),
    "address-to-point": lambda a, t: t.address_to_point(a.address),
    "address-from-field": lambda a, t: t.address_from_field(a.value),
    "block-number": lambda a, t: t.node.get_block_number(),
    "tx-effect": _cmd_tx_effect,
    "tx-receipt": lambda a, t: t.tx_receipt(a.tx_hash),
    "logs-private": lambda a, t: t.private_logs(a.from_block, a.limit),
    "node-info": lambda a, t: t.node.get_node_info(),
    "node-chain-id": lambda a, t: t.chain_id(),
    "node-version": lambda a, t: t.node_version(),
    "raw": _cmd_raw,
}


# ==============================================================================
# Parser
# ==============================================================================


def build_parser() -> argparse.ArgumentParser:
    hasher = get_hasher().name
    parser = argparse.ArgumentParser(
        prog="cazt",
        description=(
            f"Aztec note and private log toolkit. Hashes use the {hasher} field hasher; "
            "results match a network only when its own hash backend is installed."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__} (field hasher: {hasher})")
    parser.add_argument("--rpc-url", help="node RPC URL or network name (devnet, testnet)")
    parser.add_argument("--admin-url", help="node admin RPC URL")
    parser.add_argument("--timeout", type=float, default=15.0, help="HTTP timeout in seconds")
    parser.add_argument("--no-pretty", action="store_true", help="compact JSON output")
    parser.add_argument("--json", action="store_true", help="always emit JSON, even for scalar results")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # notes
    notes = sub.add_parser("notes", help="note hash commands")
    notes_sub = notes.add_subparsers(dest="notes_command", required=True)

    p = notes_sub.add_parser("compute-hash", help="compute raw / siloed / unique note hashes")
    p.add_argument("--raw-note-hash")
    p.add_argument("--siloed-note-hash")
    p.add_argument("--note-items", help="note fields (list)")
    p.add_argument("--storage-slot")
    p.add_argument("--partial", action="store_true", help="treat as a partial note")
    p.add_argument("--contract-address")
    p.add_argument("--note-nonce")
    p.set_defaults(handler="compute-hash")

    p = notes_sub.add_parser("verify", help="check a note against a transaction's note hashes")
    p.add_argument("tx_hash")
    p.add_argument("--note-hash")
    p.add_argument("--note-items", help="note fields (list)")
    p.add_argument("--storage-slot")
    p.add_argument("--contract-address")
    p.add_argument("--first-nullifier")
    p.add_argument("--note-index", type=int)
    p.set_defaults(handler="verify")

    p = sub.add_parser("decrypt-private-log", help="decrypt a private log for a recipient")
    p.add_argument("--ciphertext", required=True, help="ciphertext fields (list)")
    p.add_argument("--recipient-address", required=True, help="complete address (320 bytes hex)")
    p.add_argument("--recipient-secret-key", required=True)
    p.set_defaults(handler="decrypt-private-log")

    p = sub.add_parser("note-slot", help="derive the storage slot of a map entry")
    p.add_argument("base_slot")
    p.add_argument("key", help="address or field value")
    p.set_defaults(handler="note-slot")

    p = sub.add_parser("storage-layout", help="print the storage layout of a contract artifact")
    p.add_argument("artifact", help="@artifact.json or inline JSON")
    p.set_defaults(handler="storage-layout")

    for name, help_text in (
        ("field-from-string", "convert text to a field element"),
        ("field-to-string", "canonical hex of a field element"),
        ("field-to-buffer", "field element as 32 bytes hex"),
        ("field-from-buffer", "field element from up to 32 bytes of hex"),
        ("field-to-bigint", "field element as a decimal integer"),
        ("field-is-zero", "check whether a field element is zero"),
        ("address-from-field", "address from a field element"),
        ("note-selector", "note selector from a field element (7 bits)"),
        ("selector-from-field", "function selector from a field element"),
        ("selector-from-string", "function selector from 0x-prefixed hex"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("value")
        p.set_defaults(handler=name)

    p = sub.add_parser("field-equals", help="compare two field elements")
    p.add_argument("a")
    p.add_argument("b")
    p.set_defaults(handler="field-equals")

    for name, help_text in (
        ("field-random", "random field element"),
        ("address-zero", "the zero address"),
        ("address-random", "random valid address"),
    ):
        sub.add_parser(name, help=help_text).set_defaults(handler=name)

    for name, help_text in (
        ("address-validate", "check an address without failing"),
        ("address-to-point", "curve point of an address"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("address")
        p.set_defaults(handler=name)

    # selectors
    for name, help_text in (
        ("sig", "function selector of a signature, e.g. transfer(Field,Field)"),
        ("event-selector", "event selector of a signature"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("signature")
        p.set_defaults(handler=name)

    # hashes
    p = sub.add_parser("hash", help="hash field elements with the active field hasher")
    p.add_argument("fields", help="field elements (list)")
    p.set_defaults(handler="hash")

    for name, help_text in (
        ("keccak", "keccak-256 of hex or UTF-8 data"),
        ("sha256", "sha-256 of hex or UTF-8 data, truncated to a field element"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("data")
        p.set_defaults(handler=name)

    p = sub.add_parser("silo-private-log", help="silo a private log tag to a contract")
    p.add_argument("contract")
    p.add_argument("tag")
    p.set_defaults(handler="silo-private-log")

    p = sub.add_parser("public-data-slot", help="public data tree leaf slot of a storage slot")
    p.add_argument("contract")
    p.add_argument("slot")
    p.set_defaults(handler="public-data-slot")

    p = sub.add_parser("l1-to-l2-message-nullifier", help="nullifier of a consumed L1 to L2 message")
    p.add_argument("contract")
    p.add_argument("message_hash")
    p.add_argument("secret")
    p.set_defaults(handler="l1-to-l2-message-nullifier")

    p = sub.add_parser("silo-note-hash", help="silo a note hash to a contract")
    p.add_argument("contract")
    p.add_argument("note_hash")
    p.set_defaults(handler="silo-note-hash")

    p = sub.add_parser("unique-note-hash", help="unique note hash from nonce and siloed hash")
    p.add_argument("nonce")
    p.add_argument("siloed_note_hash")
    p.set_defaults(handler="unique-note-hash")

    p = sub.add_parser("note-hash-nonce", help="nonce from first nullifier and note index")
    p.add_argument("first_nullifier")
    p.add_argument("note_index", type=int)
    p.set_defaults(handler="note-hash-nonce")

    p = sub.add_parser("silo-nullifier", help="silo a nullifier to a contract")
    p.add_argument("contract")
    p.add_argument("nullifier")
    p.set_defaults(handler="silo-nullifier")

    p = sub.add_parser("secret-hash", help="hash a secret")
    p.add_argument("secret")
    p.set_defaults(handler="secret-hash")

    # node
    block = sub.add_parser("block", help="block queries")
    block_sub = block.add_subparsers(dest="block_command", required=True)
    block_sub.add_parser("number", help="latest block number").set_defaults(handler="block-number")

    tx = sub.add_parser("tx", help="transaction queries")
    tx_sub = tx.add_subparsers(dest="tx_command", required=True)
    p = tx_sub.add_parser("effect", help="committed effects of a transaction")
    p.add_argument("tx_hash")
    p.set_defaults(handler="tx-effect")
    p = tx_sub.add_parser("receipt", help="receipt of a transaction")
    p.add_argument("tx_hash")
    p.set_defaults(handler="tx-receipt")

    logs = sub.add_parser("logs", help="log queries")
    logs_sub = logs.add_subparsers(dest="logs_command", required=True)
    p = logs_sub.add_parser("private", help="private logs starting at a block")
    p.add_argument("--from-block", type=int, required=True)
    p.add_argument("--limit", type=int, default=1)
    p.set_defaults(handler="logs-private")

    node = sub.add_parser("node", help="node queries")
    node_sub = node.add_subparsers(dest="node_command", required=True)
    node_sub.add_parser("info", help="node information").set_defaults(handler="node-info")
    node_sub.add_parser("chain-id", help="L1 chain id").set_defaults(handler="node-chain-id")
    node_sub.add_parser("version", help="rollup version").set_defaults(handler="node-version")

    p = sub.add_parser("raw", help="send a raw JSON-RPC request")
    p.add_argument("method")
    p.add_argument("params", nargs="?", help="JSON array of params (or @file.json)")
    p.set_defaults(handler="raw")

    return parser


def render(result: Any, pretty: bool = True, force_json: bool = False) -> str:
    if isinstance(result, str) and not force_json:
        return result
    return json.dumps(result, indent=2 if pretty else None)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    settings = Settings(rpc_url=args.rpc_url, admin_url=args.admin_url, timeout=args.timeout, pretty=not args.no_pretty)
    node = AztecNode(rpc_url=settings.rpc_url, admin_url=settings.admin_url, timeout=settings.timeout)
    toolkit = CaztToolkit(node=node)

    try:
        result = HANDLERS[args.handler](args, toolkit)
    except CLI_ERRORS as e:
        logger.debug(f"{args.handler} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        toolkit.close()

    print(render(result, pretty=settings.pretty, force_json=args.json))
    return 0


if __name__ == "__main__":
    sys.exit(main())
