"""
Draw randomness derivation.

Random values are derived by hashing public inputs: a slot counter, a coarse
timestamp, the caller's identity and a salt. Anyone who knows those inputs
before the transaction commits can compute the result, so this source gives
no fairness guarantee.
"""

import hashlib
import time
from dataclasses import dataclass
from typing import Protocol

# Slot length used by SystemClock to turn wall time into a slot counter
SLOT_DURATION_MS = 400

_U64_MASK = 2**64 - 1


class Clock(Protocol):
    """Source of the slot counter and coarse timestamp for a transaction."""

    def slot(self) -> int: ...

    def unix_timestamp(self) -> int: ...


class SystemClock:
    """Wall-clock based Clock. The slot advances every SLOT_DURATION_MS."""

    def slot(self) -> int:
        return time.time_ns() // 1_000_000 // SLOT_DURATION_MS

    def unix_timestamp(self) -> int:
        return int(time.time())


@dataclass
class FixedClock:
    """Clock frozen at a given slot and timestamp."""

    current_slot: int = 0
    current_timestamp: int = 0

    def slot(self) -> int:
        return self.current_slot

    def unix_timestamp(self) -> int:
        return self.current_timestamp

    def advance(self, slots: int = 1, seconds: int = 0) -> None:
        self.current_slot += slots
        self.current_timestamp += seconds


@dataclass(frozen=True, slots=True)
class SeedContext:
    """Public inputs shared by every draw in one transaction."""

    slot: int
    unix_timestamp: int
    identity: str

    @classmethod
    def capture(cls, clock: Clock, identity: str) -> "SeedContext":
        return cls(slot=clock.slot(), unix_timestamp=clock.unix_timestamp(), identity=identity)


def derive_random_u64(context: SeedContext, salt: int) -> int:
    """
    Derive a pseudo-random u64 from the seed context and a salt.

    sha256(slot_le64 || timestamp_le64 || identity || salt_le64), first 8
    bytes little-endian.
    """
    data = (
        (context.slot & _U64_MASK).to_bytes(8, "little")
        + context.unix_timestamp.to_bytes(8, "little", signed=True)
        + context.identity.encode("utf-8")
        + (salt & _U64_MASK).to_bytes(8, "little")
    )
    digest = hashlib.sha256(data).digest()
    return int.from_bytes(digest[:8], "little")
