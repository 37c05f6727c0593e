"""Node status data structures returned by the typed RPC methods.

Each structure decodes from the JSON `result` member of a response via
from_json. Shape mismatches (missing keys, wrong types) raise DecodeError
so callers never see a half-populated record.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from noderpc.errors import DecodeError

# Number of lamports in one SOL.
LAMPORTS_PER_SOL = 1_000_000_000


class Commitment(str, enum.Enum):
    FINALIZED = "finalized"
    CONFIRMED = "confirmed"
    PROCESSED = "processed"

    def __str__(self) -> str:
        return self.value


def parse_int(value: Any, field: str = "result") -> int:
    # bool is an int subclass; the node never sends one where a number belongs.
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"{field}: expected integer, got {type(value).__name__}")
    return value


def parse_optional_int(value: Any, field: str = "result") -> int | None:
    return None if value is None else parse_int(value, field)


def parse_str(value: Any, field: str = "result") -> str:
    if not isinstance(value, str):
        raise DecodeError(f"{field}: expected string, got {type(value).__name__}")
    return value


def _object(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise DecodeError(f"{what}: expected object, got {type(value).__name__}")
    return value


def _field(obj: dict, key: str) -> Any:
    if key not in obj:
        raise DecodeError(f"missing field {key!r}")
    return obj[key]


@dataclass(frozen=True)
class EpochInfo:
    absolute_slot: int
    block_height: int
    epoch: int
    slot_index: int
    slots_in_epoch: int
    transaction_count: int | None = None

    @classmethod
    def from_json(cls, value: Any) -> EpochInfo:
        obj = _object(value, "epoch info")
        tx_count = obj.get("transactionCount")
        return cls(
            absolute_slot=parse_int(_field(obj, "absoluteSlot"), "absoluteSlot"),
            block_height=parse_int(_field(obj, "blockHeight"), "blockHeight"),
            epoch=parse_int(_field(obj, "epoch"), "epoch"),
            slot_index=parse_int(_field(obj, "slotIndex"), "slotIndex"),
            slots_in_epoch=parse_int(_field(obj, "slotsInEpoch"), "slotsInEpoch"),
            transaction_count=parse_optional_int(tx_count, "transactionCount"),
        )


@dataclass(frozen=True)
class VersionInfo:
    solana_core: str
    feature_set: int | None = None

    @classmethod
    def from_json(cls, value: Any) -> VersionInfo:
        obj = _object(value, "version")
        feature_set = obj.get("feature-set")
        return cls(
            solana_core=parse_str(_field(obj, "solana-core"), "solana-core"),
            feature_set=parse_optional_int(feature_set, "feature-set"),
        )
