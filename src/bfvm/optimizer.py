#
# Peephole optimizer for the primitive instruction stream.
# Levels (0..2):
#   0: no rewriting (primitive stream, loop targets cleared)
#   1: run folding of Add/Add and Move/Move (wrapping), net-zero runs elided
#   2: level 1 + loop idiom recognition:
#        [-] [+]              -> ClearCell          (always terminates)
#        [>] [<]              -> ScanRight/ScanLeft
#        [+ +] style [Add(d)] -> AddUntilZero(d)    (guarded at runtime)
#        [->k+<k] and the Move-first form -> TransferMultiply
#
# NOTE: Folding is a stack discipline over the output, so "+><+" folds to a
#       single Add(2) and re-optimizing an optimized stream is a no-op.
#
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Type, Union

from .ir import (
    Add, AddUntilZero, ClearCell, Instruction, LoopClose, LoopOpen, Move,
    ScanLeft, ScanRight, TransferMultiply, wrap_cell, wrap_pointer,
)

logger = logging.getLogger(__name__)

MIN_LEVEL = 0
MAX_LEVEL = 2
DEFAULT_LEVEL = 2

# Steps that reach zero from every starting cell value.
UNCONDITIONAL_CLEAR_STEPS = (1, 255)


def clamp_level(level: Optional[int]) -> int:
    if level is None:
        return DEFAULT_LEVEL
    return max(MIN_LEVEL, min(MAX_LEVEL, int(level)))


def _unlinked(instr: Instruction) -> Instruction:
    if isinstance(instr, LoopOpen):
        return LoopOpen(None, instr.position)
    if isinstance(instr, LoopClose):
        return LoopClose(None, instr.position)
    return instr


# ---------------- Run folding ----------------
class _RunFolder:
    """Output stack merging each Add/Move into a preceding one of the same kind.

    A run that cancels to zero is dropped, but its first position is kept
    for the next Add/Move of the same kind so "+" * 257 stays at position 1.
    """

    def __init__(self):
        self.out: List[Instruction] = []
        self.pending: Optional[Tuple[Type, int]] = None

    def _run_start(self, kind: Type, position: int) -> int:
        if self.pending is not None and self.pending[0] is kind:
            return self.pending[1]
        return position

    def push(self, instr: Instruction) -> None:
        out = self.out
        if isinstance(instr, (Add, Move)):
            kind = type(instr)
            wrap = wrap_cell if kind is Add else wrap_pointer
            value = wrap(instr.delta if kind is Add else instr.offset)
            position = self._run_start(kind, instr.position)
            if out and type(out[-1]) is kind:
                prev = out.pop()
                value = wrap(value + (prev.delta if kind is Add else prev.offset))
                position = prev.position
            if value != 0:
                out.append(kind(value, position))
                self.pending = None
            else:
                self.pending = (kind, position)
            return
        out.append(instr)
        self.pending = None


def fold_runs(instructions: Iterable[Instruction]) -> List[Instruction]:
    folder = _RunFolder()
    for instr in instructions:
        folder.push(_unlinked(instr))
    return folder.out


# ---------------- Idiom recognition ----------------
def _single_body_idiom(body: Instruction, position: int) -> Optional[Instruction]:
    if isinstance(body, Add):
        if body.delta in UNCONDITIONAL_CLEAR_STEPS:
            return ClearCell(position)
        return AddUntilZero(body.delta, position)
    if isinstance(body, Move):
        if body.offset == 1:
            return ScanRight(position)
        if body.offset == wrap_pointer(-1):
            return ScanLeft(position)
    return None


def _transfer_idiom(body: Sequence[Instruction], position: int) -> Optional[Instruction]:
    kinds: Tuple[Type, ...] = tuple(type(n) for n in body)
    if kinds == (Add, Move, Add, Move):
        source, there, dest, back = body
    elif kinds == (Move, Add, Move, Add):
        there, dest, back, source = body
    else:
        return None
    if wrap_pointer(there.offset + back.offset) != 0:
        return None
    return TransferMultiply(there.offset, source.delta, dest.delta, position)


def recognize_idiom(body: Sequence[Instruction], position: int) -> Optional[Instruction]:
    """Return the idiom replacing a loop with the given (folded) body, or None."""
    if len(body) == 1:
        return _single_body_idiom(body[0], position)
    if len(body) == 4:
        return _transfer_idiom(body, position)
    return None


def _try_collapse_loop(out: List[Instruction]) -> bool:
    """`out` ends with a LoopClose: replace the loop with an idiom when possible."""
    for width in (1, 4):
        start = len(out) - width - 2
        if start < 0 or not isinstance(out[start], LoopOpen):
            continue
        body = out[start + 1:-1]
        if any(isinstance(n, (LoopOpen, LoopClose)) for n in body):
            continue
        idiom = recognize_idiom(body, out[start].position)
        if idiom is not None:
            del out[start:]
            out.append(idiom)
            return True
    return False


# ---------------- Main optimizer pipeline ----------------
def optimize(instructions: Iterable[Instruction], level: Optional[int] = DEFAULT_LEVEL) -> List[Instruction]:
    """Rewrite a primitive (or already optimized) unlinked stream.

    The result keeps program order and observable behavior; loop targets are
    always cleared so the stream can be linked afresh.
    """
    level = clamp_level(level)
    source = list(instructions)

    if level == 0:
        out = [_unlinked(n) for n in source]
    elif level == 1:
        out = fold_runs(source)
    else:
        folder = _RunFolder()
        for instr in source:
            folder.push(_unlinked(instr))
            if isinstance(instr, LoopClose):
                _try_collapse_loop(folder.out)
        out = folder.out

    logger.debug("optimized %d -> %d instructions (level %d)", len(source), len(out), level)
    return out


def count_instructions(instructions: Iterable[Instruction], kind: Union[Type, Tuple[Type, ...]]) -> int:
    return sum(1 for n in instructions if isinstance(n, kind))
