"""Gshare branch predictor: counters indexed by the branch address hashed with global history."""

from __future__ import annotations

from .counters import SaturatingCounter

GLOBAL_HISTORY_LENGTH = 14
COUNTER_BITS = 2
GS_HISTORY_TABLE_SIZE = 16384

_HISTORY_MASK = (1 << GLOBAL_HISTORY_LENGTH) - 1


def gs_table_hash(ip: int, history: int) -> int:
    """Index into the pattern table for ``ip`` under global ``history``."""
    value = history & _HISTORY_MASK
    value ^= ip
    value ^= ip >> GLOBAL_HISTORY_LENGTH
    value ^= ip >> (GLOBAL_HISTORY_LENGTH * 2)
    return value % GS_HISTORY_TABLE_SIZE


class GsharePredictor:
    """Two-bit counters selected by XOR of the branch address and the global history."""

    def __init__(self) -> None:
        self.history = 0
        self.table = [SaturatingCounter(COUNTER_BITS) for _ in range(GS_HISTORY_TABLE_SIZE)]

    def predict(self, ip: int) -> bool:
        """Return True when the branch at ``ip`` is predicted taken."""
        counter = self.table[gs_table_hash(ip, self.history)]
        return counter.value() >= counter.maximum // 2

    def last_branch_result(self, ip: int, branch_target: int, taken: bool, branch_type: int) -> None:
        """Train the selected counter and shift the outcome into the global history."""
        self.table[gs_table_hash(ip, self.history)] += 1 if taken else -1
        self.history = ((self.history << 1) | (1 if taken else 0)) & _HISTORY_MASK