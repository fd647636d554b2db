from __future__ import annotations

from typing import Callable, Dict, List

from .errors import make_unknown_instruction_error
from .ir import Add, Input, Instruction, LoopClose, LoopOpen, Move, Output

BF_OPS = "+-<>,.[]"

_PRIMITIVES: Dict[str, Callable[[int], Instruction]] = {
    '+': lambda pos: Add(1, pos),
    '-': lambda pos: Add(255, pos),
    '>': lambda pos: Move(1, pos),
    '<': lambda pos: Move(65535, pos),
    ',': lambda pos: Input(pos),
    '.': lambda pos: Output(pos),
    '[': lambda pos: LoopOpen(None, pos),
    ']': lambda pos: LoopClose(None, pos),
}


def tokenize(source: str) -> List[Instruction]:
    """Map every source character onto one primitive instruction.

    There is no comment syntax: any character outside `BF_OPS`, whitespace
    included, raises UnknownInstructionError at its 1-based position.
    """
    tokens: List[Instruction] = []
    for pos, ch in enumerate(source, start=1):
        make = _PRIMITIVES.get(ch)
        if make is None:
            raise make_unknown_instruction_error(char=ch, source=source, position=pos)
        tokens.append(make(pos))
    return tokens
