"""
Note hash pipeline: raw → siloed → unique note hashes.

Stages:
    raw      = H(NOTE_HASH;        items ‖ slot)
    siloed   = H(SILOED_NOTE_HASH; contract ‖ raw)
    unique   = H(UNIQUE_NOTE_HASH; nonce ‖ siloed)

Partial notes commit their private fields first and a late-revealed value
(the last item) afterwards:
    commitment = H(NOTE_HASH; items[:-1] ‖ slot)
    raw        = H(NOTE_HASH; commitment ‖ items[-1])

A computation can start from note items, from a known raw hash, or from a
known siloed hash. The starting point is one of `FromItems`, `FromRaw` or
`FromSiloed`; the optional note nonce is passed separately.

The related siloing helpers for private log tags, public data slots and
L1 to L2 message nullifiers live here too.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Union

from cazt.crypto.field import field_to_hex, normalize_address, parse_address_field, parse_field
from cazt.crypto.hashing import GeneratorIndex, hash_fields, hash_with_separator


class NoteHashError(ValueError):
    """Base class for invalid note hash requests."""
    pass


class MissingItems(NoteHashError):
    pass


class MissingSlot(NoteHashError):
    pass


class SiloRequiresContract(NoteHashError):
    pass


class UniqueRequiresSiloed(NoteHashError):
    pass


class PartialRequiresTwoItems(NoteHashError):
    pass


# ==============================================================================
# Starting points
# ==============================================================================


@dataclass(frozen=True)
class FromItems:
    """Compute the raw hash from plaintext note items and a storage slot."""
    items: tuple[int, ...]
    slot: int
    partial: bool = False
    contract: int | None = None


@dataclass(frozen=True)
class FromRaw:
    """Start from an already computed raw note hash."""
    raw: int
    contract: int | None = None


@dataclass(frozen=True)
class FromSiloed:
    """Start from an already computed siloed note hash."""
    siloed: int
    contract: int


NoteHashSource = Union[FromItems, FromRaw, FromSiloed]


@dataclass(frozen=True)
class NoteHashes:
    """The stages that were given or computed; absent stages are None."""
    raw: int | None = None
    siloed: int | None = None
    unique: int | None = None

    def to_dict(self) -> dict[str, str]:
        result: dict[str, str] = {}
        if self.raw is not None:
            result["rawNoteHash"] = field_to_hex(self.raw)
        if self.siloed is not None:
            result["siloedNoteHash"] = field_to_hex(self.siloed)
        if self.unique is not None:
            result["uniqueNoteHash"] = field_to_hex(self.unique)
        return result


def note_hash_source(
    raw_note_hash: str | None = None,
    siloed_note_hash: str | None = None,
    note_items: Sequence[str] | None = None,
    storage_slot: str | None = None,
    partial: bool = False,
    contract_address: str | None = None,
) -> NoteHashSource:
    """
    Resolve loosely supplied text parameters into a starting point.

    Priority: siloed hash > raw hash > note items.

    Raises:
        SiloRequiresContract: siloed hash given without a contract address.
        MissingItems / MissingSlot: nothing to start from.
        InvalidHexDigits: any field value has an odd number of hex digits.
        FieldError: the contract address is longer than 32 bytes or not a
            field element.
    """
    contract = parse_address_field(normalize_address(contract_address)) if contract_address else None

    if siloed_note_hash:
        if contract is None:
            raise SiloRequiresContract("contractAddress is required when using siloedNoteHash")
        return FromSiloed(parse_field(siloed_note_hash), contract)

    if raw_note_hash:
        return FromRaw(parse_field(raw_note_hash), contract)

    if note_items is None or isinstance(note_items, (str, bytes)):
        raise MissingItems(
            "noteItems are required when not using rawNoteHash or siloedNoteHash"
        )
    if storage_slot is None:
        raise MissingSlot("storageSlot is required when computing from note items")
    return FromItems(
        items=tuple(parse_field(item) for item in note_items),
        slot=parse_field(storage_slot),
        partial=partial,
        contract=contract,
    )


# ==============================================================================
# Stage functions
# ==============================================================================


def compute_raw_note_hash(items: Sequence[int], slot: int) -> int:
    return hash_with_separator([*items, slot], GeneratorIndex.NOTE_HASH)


def compute_partial_note_hash(items: Sequence[int], slot: int) -> int:
    """
    Two-step hash of a partial note; the last item is the late-revealed value.

    Raises:
        PartialRequiresTwoItems: fewer than two items.
    """
    if len(items) < 2:
        raise PartialRequiresTwoItems(
            "partial note requires at least 2 note items "
            "(last item is used for the second hash)"
        )
    *private_items, value = items
    commitment = hash_with_separator([*private_items, slot], GeneratorIndex.NOTE_HASH)
    return hash_with_separator([commitment, value], GeneratorIndex.NOTE_HASH)


def silo_note_hash(contract: int, note_hash: int) -> int:
    return hash_with_separator([contract, note_hash], GeneratorIndex.SILOED_NOTE_HASH)


def compute_unique_note_hash(nonce: int, siloed_note_hash: int) -> int:
    return hash_with_separator([nonce, siloed_note_hash], GeneratorIndex.UNIQUE_NOTE_HASH)


def compute_note_hash_nonce(first_nullifier: int, note_index: int) -> int:
    """Nonce of the note at `note_index` in a tx whose first nullifier is given."""
    return hash_with_separator([first_nullifier, note_index], GeneratorIndex.NOTE_HASH_NONCE)


def silo_nullifier(contract: int, nullifier: int) -> int:
    return hash_with_separator([contract, nullifier], GeneratorIndex.OUTER_NULLIFIER)


def compute_secret_hash(secret: int) -> int:
    return hash_with_separator([secret], GeneratorIndex.SECRET_HASH)


def silo_private_log(contract: int, tag: int) -> int:
    """Siloed tag of a private log emitted by `contract`."""
    return hash_fields([contract, tag])


def compute_public_data_slot(contract: int, slot: int) -> int:
    """Leaf slot of a contract's public storage slot in the public data tree."""
    return hash_with_separator([contract, slot], GeneratorIndex.PUBLIC_LEAF_INDEX)


def compute_l1_to_l2_message_nullifier(contract: int, message_hash: int, secret: int) -> int:
    message_nullifier = hash_with_separator([message_hash, secret], GeneratorIndex.MESSAGE_NULLIFIER)
    return silo_nullifier(contract, message_nullifier)


# ==============================================================================
# Pipeline
# ==============================================================================


def compute_note_hash(source: NoteHashSource, nonce: int | None = None) -> int | NoteHashes:
    """
    Run the pipeline from `source`, optionally finishing with a unique hash.

    Returns:
        The bare raw hash when neither a contract nor a nonce is involved,
        otherwise a `NoteHashes` holding exactly the stages that apply.

    Raises:
        PartialRequiresTwoItems: partial mode with fewer than two items.
        UniqueRequiresSiloed: a nonce was given but no siloed hash exists.
    """
    raw: int | None = None
    siloed: int | None = None

    if isinstance(source, FromSiloed):
        siloed = source.siloed
    elif isinstance(source, FromRaw):
        raw = source.raw
        if source.contract is not None:
            siloed = silo_note_hash(source.contract, raw)
    elif isinstance(source, FromItems):
        if source.partial:
            raw = compute_partial_note_hash(source.items, source.slot)
        else:
            raw = compute_raw_note_hash(source.items, source.slot)
        if source.contract is not None:
            siloed = silo_note_hash(source.contract, raw)
    else:
        raise TypeError(f"Unsupported note hash source: {type(source).__name__}")

    if raw is not None and siloed is None and nonce is None:
        return raw

    unique: int | None = None
    if nonce is not None:
        if siloed is None:
            raise UniqueRequiresSiloed(
                "siloedNoteHash is required when computing unique hash "
                "(provide a contract address to compute it, or a siloed note hash)"
            )
        unique = compute_unique_note_hash(nonce, siloed)

    return NoteHashes(raw=raw, siloed=siloed, unique=unique)


def compute_note_hash_from_params(params: dict[str, Any]) -> str | dict[str, str]:
    """
    JSON-facing entry point mirroring the CLI parameter names.

    Keys: rawNoteHash, siloedNoteHash, noteItems, storageSlot, partial,
    contractAddress, noteNonce.
    """
    source = note_hash_source(
        raw_note_hash=params.get("rawNoteHash"),
        siloed_note_hash=params.get("siloedNoteHash"),
        note_items=params.get("noteItems"),
        storage_slot=params.get("storageSlot"),
        partial=bool(params.get("partial", False)),
        contract_address=params.get("contractAddress"),
    )
    nonce_text = params.get("noteNonce")
    nonce = parse_field(nonce_text) if nonce_text else None
    result = compute_note_hash(source, nonce)
    if isinstance(result, NoteHashes):
        return result.to_dict()
    return field_to_hex(result)
