"""The tables behind the signature path prefetcher: signatures, delta patterns,
a prefetch filter and a global history register."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple, Optional

LOG2_BLOCK_SIZE = 6

# Signature table parameters
ST_SET = 1
ST_WAY = 256
ST_TAG_BIT = 16
ST_TAG_MASK = (1 << ST_TAG_BIT) - 1
SIG_SHIFT = 3
SIG_BIT = 12
SIG_MASK = (1 << SIG_BIT) - 1
SIG_DELTA_BIT = 7

# Pattern table parameters
PT_SET = 512
PT_WAY = 4
C_SIG_BIT = 4
C_DELTA_BIT = 4
C_SIG_MAX = (1 << C_SIG_BIT) - 1
C_DELTA_MAX = (1 << C_DELTA_BIT) - 1

# Prefetch filter parameters
QUOTIENT_BIT = 10
REMAINDER_BIT = 6
HASH_BIT = QUOTIENT_BIT + REMAINDER_BIT + 1
FILTER_SET = 1 << QUOTIENT_BIT
FILL_THRESHOLD = 90
PF_THRESHOLD = 25

# Global register parameters
GLOBAL_COUNTER_BIT = 10
GLOBAL_COUNTER_MAX = (1 << GLOBAL_COUNTER_BIT) - 1
MAX_GHR_ENTRY = 8

_U64 = (1 << 64) - 1


class FilterRequest(IntEnum):
    """Kinds of request the prefetch filter handles."""

    SPP_L2C_PREFETCH = 0
    SPP_LLC_PREFETCH = 1
    L2C_DEMAND = 2
    L2C_EVICT = 3


def get_hash(key: int) -> int:
    """Mix a 64-bit key: Jenkins' integer mix followed by a multiplicative step."""
    key &= _U64
    key = (key + (key << 12)) & _U64
    key ^= key >> 22
    key = (key + (key << 4)) & _U64
    key ^= key >> 9
    key = (key + (key << 10)) & _U64
    key ^= key >> 2
    key = (key + (key << 7)) & _U64
    key ^= key >> 12
    return ((key >> 3) * 2654435761) & _U64


def _sig_delta(delta: int) -> int:
    """Sign-magnitude encoding of a delta used when building signatures."""
    return -delta + (1 << (SIG_DELTA_BIT - 1)) if delta < 0 else delta


def _next_signature(sig: int, delta: int) -> int:
    return ((sig << SIG_SHIFT) ^ _sig_delta(delta)) & SIG_MASK


@dataclass
class GhrEntry:
    """A prefetch that crossed a page boundary, kept to seed signatures of new pages."""

    valid: bool = False
    sig: int = 0
    confidence: int = 0
    offset: int = 0
    delta: int = 0


class GlobalRegister:
    """Global prefetch accuracy counters and the page-crossing history entries."""

    def __init__(self) -> None:
        self.pf_useful = 0
        self.pf_issued = 0
        self.global_accuracy = 0
        self.entries = [GhrEntry() for _ in range(MAX_GHR_ENTRY)]

    def update_entry(self, pf_sig: int, pf_confidence: int, pf_offset: int, pf_delta: int) -> None:
        """Record a page-crossing prefetch, updating the entry with the same offset
        or replacing the least confident one."""
        min_conf = 100
        victim: Optional[GhrEntry] = None
        for entry in self.entries:
            if entry.valid and entry.offset == pf_offset:
                entry.sig = pf_sig
                entry.confidence = pf_confidence
                entry.delta = pf_delta
                return
            if entry.confidence < min_conf:
                min_conf = entry.confidence
                victim = entry

        if victim is None:
            raise RuntimeError("global history register: cannot find a replacement victim")

        victim.valid = True
        victim.sig = pf_sig
        victim.confidence = pf_confidence
        victim.offset = pf_offset
        victim.delta = pf_delta

    def check_entry(self, page_offset: int) -> Optional[int]:
        """Index of the most confident entry for ``page_offset``, or None."""
        max_conf = 0
        found: Optional[int] = None
        for i, entry in enumerate(self.entries):
            if entry.offset == page_offset and max_conf < entry.confidence:
                max_conf = entry.confidence
                found = i
        return found


@dataclass
class StEntry:
    """One way of the signature table."""

    valid: bool = False
    tag: int = 0
    last_offset: int = 0
    sig: int = 0
    lru: int = 0


class SignatureUpdate(NamedTuple):
    """Result of a signature table access."""

    last_sig: int
    curr_sig: int
    delta: int


class SignatureTable:
    """Tracks, per page, the last accessed block offset and a signature of recent deltas."""

    def __init__(self, ghr: GlobalRegister) -> None:
        self.ghr = ghr
        self.entries = [[StEntry(lru=way) for way in range(ST_WAY)] for _ in range(ST_SET)]

    def read_and_update_sig(self, page: int, page_offset: int) -> SignatureUpdate:
        """Access ``page`` at ``page_offset``; return the old signature, the new one and the delta."""
        ways = self.entries[get_hash(page) % ST_SET]
        partial_page = page & ST_TAG_MASK
        last_sig = curr_sig = delta = 0
        hit = False

        match = next((e for e in ways if e.valid and e.tag == partial_page), None)
        if match is not None:
            hit = True
            last_sig = match.sig
            delta = page_offset - match.last_offset
            if delta:
                match.sig = _next_signature(last_sig, delta)
                curr_sig = match.sig
                match.last_offset = page_offset
            else:
                last_sig = 0
        else:
            match = next((e for e in ways if not e.valid), None)
            if match is None:
                match = next((e for e in ways if e.lru == ST_WAY - 1), None)
                if match is None:
                    raise RuntimeError("signature table: cannot find a replacement victim")
            match.valid = True
            match.tag = partial_page
            match.sig = 0
            match.last_offset = page_offset
            curr_sig = 0

        if not hit:
            found = self.ghr.check_entry(page_offset)
            if found is not None:
                ghr_entry = self.ghr.entries[found]
                match.sig = _next_signature(ghr_entry.sig, ghr_entry.delta)
                curr_sig = match.sig

        for entry in ways:
            if entry.lru < match.lru:
                entry.lru += 1
                if entry.lru >= ST_WAY:
                    raise RuntimeError(f"signature table: LRU value out of range: {entry.lru}")
        match.lru = 0

        return SignatureUpdate(last_sig, curr_sig, delta)


@dataclass
class PatternMatch:
    """Prefetch candidates read from the pattern table for one signature.

    ``found`` is False when the signature has never been trained; then the
    lookahead confidence and depth are the ones passed in.
    """

    found: bool
    candidates: list[tuple[int, int]] = field(default_factory=list)
    lookahead_way: Optional[int] = None
    lookahead_conf: int = 0
    depth: int = 0


class PatternTable:
    """Counts how often each delta followed each signature."""

    def __init__(self, ghr: GlobalRegister) -> None:
        self.ghr = ghr
        self.delta = [[0] * PT_WAY for _ in range(PT_SET)]
        self.c_delta = [[0] * PT_WAY for _ in range(PT_SET)]
        self.c_sig = [0] * PT_SET

    def _bump_signature(self, set_index: int) -> None:
        self.c_sig[set_index] += 1
        if self.c_sig[set_index] > C_SIG_MAX:
            self.c_delta[set_index] = [c >> 1 for c in self.c_delta[set_index]]
            self.c_sig[set_index] >>= 1

    def update_pattern(self, last_sig: int, curr_delta: int) -> None:
        """Train the correlation between ``last_sig`` and the delta that followed it."""
        set_index = get_hash(last_sig) % PT_SET
        deltas = self.delta[set_index]
        counts = self.c_delta[set_index]

        if curr_delta in deltas:
            way = deltas.index(curr_delta)
            counts[way] += 1
            self._bump_signature(set_index)
            return

        victim: Optional[int] = None
        min_counter = C_SIG_MAX
        for way, count in enumerate(counts):
            if count < min_counter:
                victim = way
                min_counter = count
        if victim is None:
            raise RuntimeError("pattern table: cannot find a replacement victim")

        deltas[victim] = curr_delta
        counts[victim] = 0
        self._bump_signature(set_index)

    def read_pattern(self, curr_sig: int, lookahead_conf: int, depth: int) -> PatternMatch:
        """Deltas predicted for ``curr_sig`` with confidence at least ``PF_THRESHOLD``."""
        set_index = get_hash(curr_sig) % PT_SET
        c_sig = self.c_sig[set_index]
        if not c_sig:
            return PatternMatch(False, lookahead_conf=lookahead_conf, depth=depth)

        result = PatternMatch(True)
        max_conf = 0
        for way, (delta, c_delta) in enumerate(zip(self.delta[set_index], self.c_delta[set_index])):
            if depth:
                pf_conf = self.ghr.global_accuracy * c_delta // c_sig * lookahead_conf // 100
            else:
                pf_conf = 100 * c_delta // c_sig
            if pf_conf >= PF_THRESHOLD:
                result.candidates.append((delta, pf_conf))
                if pf_conf > max_conf:
                    result.lookahead_way = way
                    max_conf = pf_conf

        result.lookahead_conf = max_conf
        result.depth = depth + 1 if max_conf >= PF_THRESHOLD else depth
        return result


class PrefetchFilter:
    """Remembers recently prefetched lines to drop duplicates and measure accuracy."""

    def __init__(self, ghr: GlobalRegister) -> None:
        self.ghr = ghr
        self.remainder_tag = [0] * FILTER_SET
        self.valid = [False] * FILTER_SET
        self.useful = [False] * FILTER_SET

    def check(self, check_addr: int, filter_request: int) -> bool:
        """Apply ``filter_request`` to the line holding ``check_addr``.

        Returns False only for a prefetch that the filter already holds.
        """
        try:
            request = FilterRequest(filter_request)
        except ValueError:
            raise ValueError(f"invalid filter request type: {filter_request}") from None

        hashed = get_hash(check_addr >> LOG2_BLOCK_SIZE)
        quotient = (hashed >> REMAINDER_BIT) & ((1 << QUOTIENT_BIT) - 1)
        remainder = hashed % (1 << REMAINDER_BIT)
        present = (self.valid[quotient] or self.useful[quotient]) and self.remainder_tag[quotient] == remainder

        if request is FilterRequest.SPP_L2C_PREFETCH:
            if present:
                return False
            self.valid[quotient] = True
            self.useful[quotient] = False
            self.remainder_tag[quotient] = remainder
        elif request is FilterRequest.SPP_LLC_PREFETCH:
            # Low-confidence prefetches go to the LLC and are not marked, so that
            # a later confident prefetch of the same line can still be issued.
            if present:
                return False
        elif request is FilterRequest.L2C_DEMAND:
            if self.remainder_tag[quotient] == remainder and not self.useful[quotient]:
                self.useful[quotient] = True
                if self.valid[quotient]:
                    self.ghr.pf_useful += 1
        else:
            if self.valid[quotient] and not self.useful[quotient] and self.ghr.pf_useful:
                self.ghr.pf_useful -= 1
            self.valid[quotient] = False
            self.useful[quotient] = False
            self.remainder_tag[quotient] = 0

        return True