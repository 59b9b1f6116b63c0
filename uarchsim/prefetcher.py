"""The prefetcher interface and the simplest prefetchers."""

from __future__ import annotations

from abc import ABC, abstractmethod

LOG2_BLOCK_SIZE = 6
BLOCK_SIZE = 1 << LOG2_BLOCK_SIZE
LOG2_PAGE_SIZE = 12
PAGE_SIZE = 1 << LOG2_PAGE_SIZE
ADDRESS_MASK = (1 << 64) - 1


class CacheInterface(ABC):
    """What a prefetcher needs from the cache it is attached to."""

    virtual_prefetch: bool = False

    @abstractmethod
    def prefetch_line(self, pf_addr: int, fill_this_level: bool, metadata: int) -> bool:
        """Request a prefetch of ``pf_addr``; return whether it was accepted."""

    @abstractmethod
    def mshr_occupancy_ratio(self) -> float:
        """Fraction of the miss-status holding registers in use."""


class Prefetcher:
    """A prefetcher that issues nothing; subclasses override the hooks they use.

    The base class counts the cycles it has seen and remembers the last branch
    it was shown, which ``final_stats`` reports.
    """

    def __init__(self, cache: CacheInterface) -> None:
        self.cache = cache
        self.cycles = 0
        self.last_branch: tuple[int, int, int] | None = None

    def initialize(self) -> None:
        """Prepare the prefetcher before simulation."""
        self.cycles = 0
        self.last_branch = None

    def cache_operate(
        self, addr: int, ip: int, cache_hit: bool, useful_prefetch: bool, access_type: int, metadata_in: int
    ) -> int:
        """Observe a cache access and return the metadata to pass on."""
        return metadata_in

    def cache_fill(
        self, addr: int, set_index: int, way: int, prefetch: bool, evicted_addr: int, metadata_in: int
    ) -> int:
        """Observe a cache fill and return the metadata to pass on."""
        return metadata_in

    def cycle_operate(self) -> None:
        """Do per-cycle work."""
        self.cycles += 1

    def final_stats(self) -> dict[str, object]:
        """Return the statistics gathered during simulation."""
        return {"cycles": self.cycles, "last_branch": self.last_branch}

    def branch_operate(self, ip: int, branch_type: int, branch_target: int) -> None:
        """Observe a branch (instruction prefetchers only)."""
        self.last_branch = (ip, branch_type, branch_target)


class NoPrefetcher(Prefetcher):
    """Never prefetches."""


class NoInstructionPrefetcher(Prefetcher):
    """Never prefetches; checks that it only sees instruction fetches."""

    def cache_operate(
        self, addr: int, ip: int, cache_hit: bool, useful_prefetch: bool, access_type: int, metadata_in: int
    ) -> int:
        if addr != ip:
            raise ValueError("an instruction prefetcher expects the access address to equal the ip")
        return metadata_in


class NextLinePrefetcher(Prefetcher):
    """Prefetches the block after every accessed block."""

    def cache_operate(
        self, addr: int, ip: int, cache_hit: bool, useful_prefetch: bool, access_type: int, metadata_in: int
    ) -> int:
        self.cache.prefetch_line((addr + BLOCK_SIZE) & ADDRESS_MASK, True, metadata_in)
        return metadata_in


class NextLineInstructionPrefetcher(NextLinePrefetcher):
    """Prefetches the instruction block after every fetched block."""