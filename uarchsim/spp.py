"""Signature path prefetcher: learns per-page delta signatures and prefetches
along the most confident path of predicted deltas."""

from __future__ import annotations

from .prefetcher import (
    ADDRESS_MASK,
    BLOCK_SIZE,
    LOG2_BLOCK_SIZE,
    LOG2_PAGE_SIZE,
    PAGE_SIZE,
    CacheInterface,
    Prefetcher,
)
from .spp_tables import (
    C_DELTA_BIT,
    C_SIG_BIT,
    FILL_THRESHOLD,
    FILTER_SET,
    GLOBAL_COUNTER_MAX,
    PF_THRESHOLD,
    PT_SET,
    PT_WAY,
    SIG_DELTA_BIT,
    ST_SET,
    ST_TAG_BIT,
    ST_TAG_MASK,
    ST_WAY,
    FilterRequest,
    GlobalRegister,
    PatternTable,
    PrefetchFilter,
    SignatureTable,
    _next_signature,
    get_hash,
)

DEFAULT_MSHR_SIZE = 32
_GHR_OFFSET_MASK = 0x3F


def _put(queue: list[int], index: int, value: int) -> None:
    if index >= len(queue):
        queue.extend([0] * (index + 1 - len(queue)))
    queue[index] = value


def _reserve(queue: list[int], length: int) -> None:
    if length > len(queue):
        queue.extend([0] * (length - len(queue)))


class SppPrefetcher(Prefetcher):
    """Prefetches blocks within the accessed page along the learned delta path.

    The prefetch queue holds as many slots as the cache has MSHR entries
    (``cache.mshr_size`` when the cache has it); the lookahead stops once the
    queue is full.
    """

    def __init__(self, cache: CacheInterface) -> None:
        super().__init__(cache)
        self.mshr_size = max(1, int(getattr(cache, "mshr_size", DEFAULT_MSHR_SIZE)))
        self._build_tables()

    def _build_tables(self) -> None:
        self.ghr = GlobalRegister()
        self.signature_table = SignatureTable(self.ghr)
        self.pattern_table = PatternTable(self.ghr)
        self.filter = PrefetchFilter(self.ghr)

    def initialize(self) -> None:
        """Start from empty tables and print their parameters."""
        super().initialize()
        self._build_tables()
        print("Initialize SIGNATURE TABLE")
        print(f"ST_SET: {ST_SET}")
        print(f"ST_WAY: {ST_WAY}")
        print(f"ST_TAG_BIT: {ST_TAG_BIT}")
        print(f"ST_TAG_MASK: {ST_TAG_MASK:x}")
        print()
        print("Initialize PATTERN TABLE")
        print(f"PT_SET: {PT_SET}")
        print(f"PT_WAY: {PT_WAY}")
        print(f"SIG_DELTA_BIT: {SIG_DELTA_BIT}")
        print(f"C_SIG_BIT: {C_SIG_BIT}")
        print(f"C_DELTA_BIT: {C_DELTA_BIT}")
        print()
        print("Initialize PREFETCH FILTER")
        print(f"FILTER_SET: {FILTER_SET}")

    def cache_operate(
        self, addr: int, ip: int, cache_hit: bool, useful_prefetch: bool, access_type: int, metadata_in: int
    ) -> int:
        ghr = self.ghr
        page = addr >> LOG2_PAGE_SIZE
        page_offset = (addr >> LOG2_BLOCK_SIZE) & (PAGE_SIZE // BLOCK_SIZE - 1)

        ghr.global_accuracy = (100 * ghr.pf_useful) // ghr.pf_issued if ghr.pf_issued else 0

        last_sig, curr_sig, delta = self.signature_table.read_and_update_sig(page, page_offset)
        self.filter.check(addr, FilterRequest.L2C_DEMAND)

        if last_sig:
            self.pattern_table.update_pattern(last_sig, delta)

        self._lookahead(addr, curr_sig)
        return metadata_in

    def _lookahead(self, addr: int, curr_sig: int) -> None:
        confidence_q = [0] * self.mshr_size
        delta_q = [0] * self.mshr_size
        confidence_q[0] = 100

        base_addr = addr
        lookahead_conf = 100
        depth = 0
        head = tail = 0

        while True:
            match = self.pattern_table.read_pattern(curr_sig, lookahead_conf, depth)
            if match.found:
                for cand_delta, cand_conf in match.candidates:
                    _put(delta_q, tail, cand_delta)
                    _put(confidence_q, tail, cand_conf)
                    tail += 1
                # One slot past the candidates is skipped, keeping whatever it held.
                tail += 1
                _reserve(delta_q, tail)
                _reserve(confidence_q, tail)
            else:
                _put(confidence_q, tail, 0)
            lookahead_conf = match.lookahead_conf
            depth = match.depth

            do_lookahead = False
            for i in range(head, tail):
                confidence = confidence_q[i]
                if confidence < PF_THRESHOLD:
                    continue
                self._issue(addr, base_addr, curr_sig, delta_q[i], confidence)
                do_lookahead = True
                head += 1

            if match.lookahead_way is not None:
                set_index = get_hash(curr_sig) % PT_SET
                way_delta = self.pattern_table.delta[set_index][match.lookahead_way]
                base_addr = (base_addr + way_delta * BLOCK_SIZE) & ADDRESS_MASK
                curr_sig = _next_signature(curr_sig, way_delta)

            if not (do_lookahead and tail < self.mshr_size):
                break

    def _issue(self, addr: int, base_addr: int, curr_sig: int, delta: int, confidence: int) -> None:
        pf_addr = ((base_addr & ~(BLOCK_SIZE - 1)) + delta * BLOCK_SIZE) & ADDRESS_MASK
        fill_here = confidence >= FILL_THRESHOLD

        if (addr & ~(PAGE_SIZE - 1)) == (pf_addr & ~(PAGE_SIZE - 1)):
            request = FilterRequest.SPP_L2C_PREFETCH if fill_here else FilterRequest.SPP_LLC_PREFETCH
            if self.filter.check(pf_addr, request):
                self.cache.prefetch_line(pf_addr, fill_here, 0)
                if fill_here:
                    ghr = self.ghr
                    ghr.pf_issued += 1
                    if ghr.pf_issued > GLOBAL_COUNTER_MAX:
                        ghr.pf_issued >>= 1
                        ghr.pf_useful >>= 1
        else:
            # Remember page-crossing prefetches to bootstrap learning on the next page.
            self.ghr.update_entry(curr_sig, confidence, (pf_addr >> LOG2_BLOCK_SIZE) & _GHR_OFFSET_MASK, delta)

    def cache_fill(
        self, addr: int, set_index: int, way: int, prefetch: bool, evicted_addr: int, metadata_in: int
    ) -> int:
        self.filter.check(evicted_addr, FilterRequest.L2C_EVICT)
        return metadata_in