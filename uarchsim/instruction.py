"""Decoded instructions and the branch classification of trace records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Sequence

REG_STACK_POINTER = 6
REG_FLAGS = 25
REG_INSTRUCTION_POINTER = 26

_SPECIAL_REGISTERS = frozenset({REG_STACK_POINTER, REG_FLAGS, REG_INSTRUCTION_POINTER})
_NO_ASID = 0xFF


class BranchType(IntEnum):
    NOT_BRANCH = 0
    BRANCH_DIRECT_JUMP = 1
    BRANCH_INDIRECT = 2
    BRANCH_CONDITIONAL = 3
    BRANCH_DIRECT_CALL = 4
    BRANCH_INDIRECT_CALL = 5
    BRANCH_RETURN = 6
    BRANCH_OTHER = 7


@dataclass
class TraceRecord:
    """One instruction as stored in a trace; zero entries in the lists are unused slots."""

    ip: int
    is_branch: bool = False
    branch_taken: bool = False
    destination_registers: Sequence[int] = ()
    source_registers: Sequence[int] = ()
    destination_memory: Sequence[int] = ()
    source_memory: Sequence[int] = ()
    opcode: Sequence[int] = ()
    thread_id: int = 0
    asid: tuple[int, int] | None = None


@dataclass
class Instruction:
    """An instruction as modelled by the out-of-order core."""

    ip: int = 0
    thread_id: int = 0
    instr_id: int = 0
    event_cycle: int = 0

    is_branch: bool = False
    branch_taken: bool = False
    branch_prediction: bool = False
    branch_mispredicted: bool = False

    asid: tuple[int, int] = (_NO_ASID, _NO_ASID)
    opcode: tuple[int, ...] = ()

    branch_type: BranchType = BranchType.NOT_BRANCH
    branch_target: int = 0

    dib_checked: int = 0
    fetched: int = 0
    decoded: int = 0
    scheduled: int = 0
    executed: int = 0

    completed_mem_ops: int = 0
    num_reg_dependent: int = 0

    destination_registers: list[int] = field(default_factory=list)
    source_registers: list[int] = field(default_factory=list)
    destination_memory: list[int] = field(default_factory=list)
    source_memory: list[int] = field(default_factory=list)

    registers_instrs_depend_on_me: list["Instruction"] = field(default_factory=list)

    def num_mem_ops(self) -> int:
        """Number of memory operands, loads and stores together."""
        return len(self.destination_memory) + len(self.source_memory)


def _nonzero(values: Sequence[int]) -> list[int]:
    return [v for v in values if v != 0]


def decode_instruction(record: TraceRecord, asid: int | tuple[int, int] | None = None) -> Instruction:
    """Build an ``Instruction`` from a trace record and classify its branch type.

    ``asid`` may be a CPU number, used for both address-space ids, or a pair.
    When it is omitted the record's own ``asid`` is used.
    """
    if asid is None:
        asid = record.asid if record.asid is not None else (_NO_ASID, _NO_ASID)
    elif isinstance(asid, int):
        asid = (asid, asid)
    else:
        asid = tuple(asid)

    dest_regs = _nonzero(record.destination_registers)
    src_regs = _nonzero(record.source_registers)

    writes_sp = REG_STACK_POINTER in dest_regs
    writes_ip = REG_INSTRUCTION_POINTER in dest_regs
    reads_sp = REG_STACK_POINTER in src_regs
    reads_flags = REG_FLAGS in src_regs
    reads_ip = REG_INSTRUCTION_POINTER in src_regs
    reads_other = any(r not in _SPECIAL_REGISTERS for r in src_regs)

    is_branch = bool(record.is_branch)
    branch_taken = bool(record.branch_taken)
    branch_type = BranchType.NOT_BRANCH

    if not reads_sp and not reads_flags and writes_ip and not reads_other:
        is_branch, branch_taken, branch_type = True, True, BranchType.BRANCH_DIRECT_JUMP
    elif not reads_sp and not reads_flags and writes_ip and reads_other:
        is_branch, branch_taken, branch_type = True, True, BranchType.BRANCH_INDIRECT
    elif not reads_sp and reads_ip and not writes_sp and writes_ip and reads_flags and not reads_other:
        is_branch, branch_type = True, BranchType.BRANCH_CONDITIONAL
    elif reads_sp and reads_ip and writes_sp and writes_ip and not reads_flags and not reads_other:
        is_branch, branch_taken, branch_type = True, True, BranchType.BRANCH_DIRECT_CALL
    elif reads_sp and reads_ip and writes_sp and writes_ip and not reads_flags and reads_other:
        is_branch, branch_taken, branch_type = True, True, BranchType.BRANCH_INDIRECT_CALL
    elif reads_sp and not reads_ip and writes_sp and writes_ip:
        is_branch, branch_taken, branch_type = True, True, BranchType.BRANCH_RETURN
    elif writes_ip:
        is_branch, branch_type = True, BranchType.BRANCH_OTHER
    else:
        branch_taken = False

    return Instruction(
        ip=record.ip,
        thread_id=record.thread_id,
        is_branch=is_branch,
        branch_taken=branch_taken,
        asid=asid,
        opcode=tuple(record.opcode),
        branch_type=branch_type,
        destination_registers=dest_regs,
        source_registers=src_regs,
        destination_memory=_nonzero(record.destination_memory),
        source_memory=_nonzero(record.source_memory),
    )


def program_order(lhs: Instruction, rhs: Instruction) -> bool:
    """True when ``lhs`` comes before ``rhs`` in program order."""
    return lhs.instr_id < rhs.instr_id