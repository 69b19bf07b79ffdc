"""
Storage slot utilities: map slot derivation and contract storage layouts.

Notes live under a storage slot. A state variable declared at `base_slot`
occupies that slot directly; an entry of a map declared there lives at

    derive_storage_slot_in_map(base_slot, key)

Map keys are either addresses (0x + 64 hex digits) or plain field values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from cazt.core.address import AddressError, is_address_string, parse_address
from cazt.crypto.field import field_to_hex, is_hex_digits, parse_field
from cazt.crypto.hashing import derive_storage_slot_in_map

logger = logging.getLogger("cazt.storage")


class StorageError(Exception):
    """Raised when a storage layout or slot cannot be resolved."""
    pass


@dataclass(frozen=True)
class AddressKey:
    value: int


@dataclass(frozen=True)
class FieldKey:
    value: int


MapKey = Union[AddressKey, FieldKey]


def classify_map_key(key: str) -> MapKey:
    """
    Interpret a map key as an address when it has the address shape and is a
    valid field element, and as a field value otherwise.
    """
    if is_address_string(key):
        try:
            return AddressKey(parse_address(key))
        except AddressError:
            pass
    return FieldKey(parse_field(key))


def derive_note_slot(base_slot: str, key: str) -> int:
    """Storage slot of the map entry `key` for a map declared at `base_slot`."""
    map_key = classify_map_key(key)
    logger.debug(f"Map key interpreted as {type(map_key).__name__}")
    return derive_storage_slot_in_map(parse_field(base_slot), map_key.value)


def get_storage_layout(artifact: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """
    Extract `{name: {"slot": hex, "typ": str | None}}` from a contract artifact.

    Accepts the loaded artifact form (a top-level `storageLayout` mapping) and
    the compiled form (`outputs.globals.storage[0].fields`).

    Raises:
        StorageError: if the artifact carries no storage layout.
    """
    layout = artifact.get("storageLayout")
    if layout:
        return {
            name: {"slot": _slot_to_hex(info.get("slot")), "typ": info.get("typ")}
            for name, info in layout.items()
        }

    storage = artifact.get("outputs", {}).get("globals", {}).get("storage")
    if storage:
        result: dict[str, dict[str, Any]] = {}
        for entry in storage[0].get("fields", []):
            name = entry.get("name")
            slot = _compiled_slot(entry.get("value", {}))
            if name is None or slot is None:
                continue
            result[name] = {"slot": _slot_to_hex(slot), "typ": None}
        if result:
            return result

    raise StorageError(
        f"Contract artifact {artifact.get('name', '<unnamed>')!r} does not have storageLayout"
    )


def resolve_storage_slot(
    artifact: dict[str, Any], name: str, key: str | None = None
) -> int:
    """
    Look up a named slot in the artifact, deriving the map slot if `key` is given.

    Raises:
        StorageError: unknown name or missing layout.
    """
    layout = get_storage_layout(artifact)
    if name not in layout:
        raise StorageError(
            f'Storage slot "{name}" not found in contract artifact. '
            f"Available slots: {', '.join(layout)}"
        )
    base_slot = layout[name]["slot"]
    if key is None:
        return parse_field(base_slot)
    return derive_note_slot(base_slot, key)


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _slot_to_hex(slot: Any) -> str:
    if isinstance(slot, int):
        return field_to_hex(slot)
    if isinstance(slot, str):
        if slot.startswith("0x") and slot[2:] and is_hex_digits(slot[2:]):
            return field_to_hex(int(slot, 16))
        if slot.isascii() and slot.isdigit():
            return field_to_hex(int(slot))
    raise StorageError(f"Unsupported slot value: {slot!r}")


def _compiled_slot(value: dict[str, Any]) -> str | None:
    """Dig the slot out of a compiled `{"kind": "struct", "fields": [...]}` entry."""
    for field in value.get("fields", []):
        if field.get("name") == "slot":
            raw = field.get("value", {}).get("value")
            # compiled artifacts store integers as bare hex
            return None if raw is None else "0x" + raw
    return None
