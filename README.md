# uarchsim

Building blocks for cycle-level microarchitecture simulation. The package is
plain Python and has no runtime dependencies.

## What is included

- **Clocking**: `uarchsim.operable.Operable` is an abstract base class for clocked
  components. Subclasses implement `operate()`. `tick()` calls it at a scaled clock
  rate: a component built with `scale=2` operates on every other tick. The class also
  has the hooks `initialize()`, `begin_phase()`, `end_phase(cpu)` and
  `print_deadlock()`.
- **Instructions**: `uarchsim.instruction.decode_instruction(record, asid)` turns a
  `TraceRecord` into an `Instruction`. It drops the zero (unused) register and memory
  slots, and it sets `branch_type` to a `BranchType` according to which of the stack
  pointer, flags and instruction pointer registers the instruction reads and writes.
  `program_order(lhs, rhs)` compares two instructions by `instr_id`.
- **Deadlock reports**: `uarchsim.deadlock.format_deadlock(entries, kind_name, fmtstr,
  packing_func)` lists a queue entry by entry and shows `None` slots as `empty`.
  `print_deadlock(...)` writes that list to a file, or to standard output if no file
  is given.
- **Saturating counters**: `SaturatingCounter(bits, value)` and
  `SignedSaturatingCounter(bits, value)` in `uarchsim.counters`. When an arithmetic
  result or an assigned value falls outside the counter's range, it is clamped to that
  range instead of wrapping around.
- **Branch predictors**, each with `predict(ip)` and
  `last_branch_result(ip, branch_target, taken, branch_type)`:
  - `GsharePredictor` in `uarchsim.gshare`
  - `HashedPerceptronPredictor` in `uarchsim.hashed_perceptron`
  - `PerceptronPredictor` in `uarchsim.perceptron`, built from `Perceptron`
- **Prefetchers**, each built on a `CacheInterface`:
  - `NoPrefetcher`, `NoInstructionPrefetcher`, `NextLinePrefetcher` and
    `NextLineInstructionPrefetcher` in `uarchsim.prefetcher`
  - `SppPrefetcher` in `uarchsim.spp`, the signature path prefetcher. It is built on
    `SignatureTable`, `PatternTable`, `PrefetchFilter` and `GlobalRegister` in
    `uarchsim.spp_tables`. Its prefetch queue has as many slots as the cache's
    `mshr_size` attribute, or 32 when the cache does not have that attribute.

## Installation

```
pip install .
```

## Example: a branch predictor

```python
from uarchsim.gshare import GsharePredictor
from uarchsim.instruction import BranchType

bp = GsharePredictor()
for _ in range(20):
    bp.last_branch_result(0x400000, 0x400100, True, BranchType.BRANCH_CONDITIONAL)
print(bp.predict(0x400000))  # True
```

## Example: a prefetcher

A prefetcher talks to its cache through a `CacheInterface`. The cache must provide
`prefetch_line(pf_addr, fill_this_level, metadata)` and `mshr_occupancy_ratio()`.

```python
from uarchsim.prefetcher import CacheInterface, NextLinePrefetcher

class RecordingCache(CacheInterface):
    def __init__(self):
        self.issued = []

    def prefetch_line(self, pf_addr, fill_this_level, metadata):
        self.issued.append(pf_addr)
        return True

    def mshr_occupancy_ratio(self):
        return 0.0

cache = RecordingCache()
pf = NextLinePrefetcher(cache)
pf.cache_operate(0x1000, 0x400000, False, False, 0, 0)
print([hex(a) for a in cache.issued])  # ['0x1040']
```

## What the package does not do

The package provides components, not a simulator. It does not contain a cache, a
DRAM model, a page table walker, an out-of-order core or a trace reader. It also has
no command to run. To drive the predictors and prefetchers, you supply the surrounding
model yourself, for example a class that implements `CacheInterface`.

## Running the tests

```
pip install .[test]
pytest
```