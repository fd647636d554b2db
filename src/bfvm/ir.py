from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

TAPE_SIZE = 65536
CELL_MODULUS = 256
EOF_VALUE = 0


def wrap_cell(value: int) -> int:
    return value % CELL_MODULUS


def wrap_pointer(value: int) -> int:
    return value % TAPE_SIZE


def signed_cell(value: int) -> int:
    """Signed view of a wrapped cell delta (255 -> -1)."""
    value = wrap_cell(value)
    return value - CELL_MODULUS if value >= CELL_MODULUS // 2 else value


def signed_pointer(value: int) -> int:
    value = wrap_pointer(value)
    return value - TAPE_SIZE if value >= TAPE_SIZE // 2 else value


# ---------------- Instructions ----------------
# Every instruction remembers the 1-based source position that produced it.

@dataclass(frozen=True)
class Add:
    delta: int  # wrapping u8
    position: int = 0


@dataclass(frozen=True)
class Move:
    offset: int  # wrapping u16
    position: int = 0


@dataclass(frozen=True)
class Input:
    position: int = 0


@dataclass(frozen=True)
class Output:
    position: int = 0


@dataclass(frozen=True)
class LoopOpen:
    target: Optional[int] = None
    position: int = 0


@dataclass(frozen=True)
class LoopClose:
    target: Optional[int] = None
    position: int = 0


@dataclass(frozen=True)
class ClearCell:
    position: int = 0


@dataclass(frozen=True)
class ScanLeft:
    position: int = 0


@dataclass(frozen=True)
class ScanRight:
    position: int = 0


@dataclass(frozen=True)
class AddUntilZero:
    step: int  # wrapping u8, never 0
    position: int = 0


@dataclass(frozen=True)
class TransferMultiply:
    offset: int  # wrapping u16, never 0
    source_delta: int
    dest_delta: int
    position: int = 0


Instruction = Union[
    Add, Move, Input, Output, LoopOpen, LoopClose,
    ClearCell, ScanLeft, ScanRight, AddUntilZero, TransferMultiply,
]

LOOP_INSTRUCTIONS = (LoopOpen, LoopClose)
IDIOM_INSTRUCTIONS = (ClearCell, ScanLeft, ScanRight, AddUntilZero, TransferMultiply)


def describe(instr: Instruction) -> str:
    """Compact one-line rendering of a single instruction."""
    if isinstance(instr, Add):
        return f"add {signed_cell(instr.delta):+d}"
    if isinstance(instr, Move):
        return f"move {signed_pointer(instr.offset):+d}"
    if isinstance(instr, Input):
        return "input"
    if isinstance(instr, Output):
        return "output"
    if isinstance(instr, LoopOpen):
        return f"open -> {instr.target}"
    if isinstance(instr, LoopClose):
        return f"close -> {instr.target}"
    if isinstance(instr, ClearCell):
        return "clear"
    if isinstance(instr, ScanLeft):
        return "scan -1"
    if isinstance(instr, ScanRight):
        return "scan +1"
    if isinstance(instr, AddUntilZero):
        return f"drain {signed_cell(instr.step):+d}"
    if isinstance(instr, TransferMultiply):
        return (
            f"transfer [{signed_pointer(instr.offset):+d}] "
            f"src {signed_cell(instr.source_delta):+d} dst {signed_cell(instr.dest_delta):+d}"
        )
    raise TypeError(f"Unexpected instruction: {instr!r}")


def render(instructions: Iterable[Instruction]) -> str:
    lines: List[str] = []
    for index, instr in enumerate(instructions):
        lines.append(f"{index:6d}  @{instr.position:<6d} {describe(instr)}")
    return "\n".join(lines)
