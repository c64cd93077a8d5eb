"""Sticker Ledger Arithmetic — capacity derived from live usage rows.

Invariants:
    - used = count(usages where is_deleted = false); never a stored counter
    - usage_limit None means unlimited
    - has_capacity(used, limit) is the single admission rule for allocation

Design Decisions:
    - Ledger over counter: recomputing the live count makes reclaim idempotent
      and removes the double-decrement race of a mutable integer
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StickerCapacity:
    used: int
    limit: int | None

    @property
    def remaining(self) -> int | None:
        if self.limit is None:
            return None
        return max(self.limit - self.used, 0)

    @property
    def exhausted(self) -> bool:
        return not has_capacity(self.used, self.limit)


def has_capacity(used: int, limit: int | None) -> bool:
    if limit is None:
        return True
    return used < limit
