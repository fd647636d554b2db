from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from .errors import make_malformed_closed_loop_error, make_malformed_open_loop_error
from .ir import Instruction, LoopClose, LoopOpen

logger = logging.getLogger(__name__)


def link(instructions: Iterable[Instruction], *, source: str = "") -> Tuple[Instruction, ...]:
    """Pair every LoopOpen with its LoopClose and fill in mutual jump targets.

    Raises MalformedClosedLoopError at the first close with nothing open, or
    MalformedOpenLoopError at the oldest open left unmatched. `source` is only
    used to render the error context.
    """
    commands: List[Instruction] = list(instructions)
    open_loops: List[int] = []
    loops: List[Tuple[int, int]] = []

    for index, instr in enumerate(commands):
        if isinstance(instr, LoopOpen):
            open_loops.append(index)
        elif isinstance(instr, LoopClose):
            if not open_loops:
                raise make_malformed_closed_loop_error(source=source, position=instr.position)
            loops.append((open_loops.pop(), index))

    if open_loops:
        oldest = commands[open_loops[0]]
        raise make_malformed_open_loop_error(source=source, position=oldest.position)

    for open_index, close_index in loops:
        commands[open_index] = LoopOpen(close_index, commands[open_index].position)
        commands[close_index] = LoopClose(open_index, commands[close_index].position)

    logger.debug("linked %d loop pairs over %d instructions", len(loops), len(commands))
    return tuple(commands)


def is_linked(instructions: Iterable[Instruction]) -> bool:
    """True when every loop instruction carries a target pointing at its partner."""
    commands = list(instructions)
    for index, instr in enumerate(commands):
        if isinstance(instr, (LoopOpen, LoopClose)):
            target: Optional[int] = instr.target
            if target is None or not 0 <= target < len(commands):
                return False
            partner = commands[target]
            expected = LoopClose if isinstance(instr, LoopOpen) else LoopOpen
            if not isinstance(partner, expected) or partner.target != index:
                return False
    return True
