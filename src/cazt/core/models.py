"""
Data models for node responses and note checks.
Field values are kept as 0x-prefixed hex strings, exactly as the node sends them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TxEffect(BaseModel):
    """The side effects a mined transaction committed to the ledger."""
    tx_hash: str
    block_number: int | None = None
    note_hashes: list[str] = Field(default_factory=list)
    nullifiers: list[str] = Field(default_factory=list)
    private_logs: list[Any] = Field(default_factory=list)
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def first_nullifier(self) -> str | None:
        """The tx's first nullifier, which seeds every note nonce in the tx."""
        return self.nullifiers[0] if self.nullifiers else None

    @classmethod
    def from_rpc(cls, tx_hash: str, data: dict[str, Any]) -> TxEffect:
        """Build from a `node_getTxEffect` result (`{"data": {...}, "l2BlockNumber": n}`)."""
        body = data.get("data", data)
        block = data.get("l2BlockNumber")
        return cls(
            tx_hash=str(body.get("txHash", tx_hash)),
            block_number=int(block) if block is not None else None,
            note_hashes=[str(h) for h in body.get("noteHashes", [])],
            nullifiers=[str(n) for n in body.get("nullifiers", [])],
            private_logs=body.get("privateLogs", []),
            raw=data,
        )


class NoteVerification(BaseModel):
    """Result of checking a note hash against a transaction's note hashes."""
    exists: bool
    base_note_hash: str = Field(serialization_alias="baseNoteHash")
    siloed_hash: str = Field(serialization_alias="siloedHash")
    unique_hash: str | None = Field(default=None, serialization_alias="uniqueHash")
    note_hashes: list[str] = Field(default_factory=list, serialization_alias="noteHashes")
    first_nullifier: str | None = Field(default=None, serialization_alias="firstNullifier")

    @property
    def note_count(self) -> int:
        return len(self.note_hashes)

    def to_output(self) -> dict[str, Any]:
        """camelCase dict for JSON output."""
        out = self.model_dump(by_alias=True)
        out["noteCount"] = self.note_count
        return out
