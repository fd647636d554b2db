from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Iterable, Optional, Sequence, Tuple

from .errors import (
    BFVMError,
    make_infinite_loop_found_error,
    make_infinite_loop_memory_full_error,
    make_infinite_loop_movement_error,
    make_missing_arguments_error,
    make_state_error,
    make_unconnected_loops_error,
)
from .ir import EOF_VALUE, Instruction
from .linker import is_linked
from .kernel import (
    STOP_END, STOP_INFINITE, STOP_INPUT, STOP_MEMORY_FULL, STOP_MOVEMENT,
    STOP_OUTPUT, STOP_UNLINKED, encode, new_tape, run_until_stop,
)

logger = logging.getLogger(__name__)


class MachineState(Enum):
    UNINITIALIZED = auto()
    LOADED = auto()
    COMPLETED = auto()
    FAILED = auto()


class VirtualMachine:
    """
    Tape machine executing a linked instruction stream.

    Memory Layout:
    - 65536 unsigned 8-bit cells, zero-initialized, owned by this instance
    - The pointer wraps at both ends of the tape

    Lifecycle:
    - Instructions and input are each loaded at most once
    - run() does real work only the first time; later calls return at once
    - Output exists only after a successful run (all-or-nothing)

    The input queue is consumed from its tail: callers holding data in
    natural order pass it reversed.
    """

    def __init__(self):
        self._program: Optional[Tuple[Instruction, ...]] = None
        self._queue: Optional[bytearray] = None
        self._exhausted = False
        self._output: Optional[bytes] = None
        self._error: Optional[BFVMError] = None
        self._memory = new_tape()
        self._pointer = 0

    # ===== Lifecycle =====

    @property
    def state(self) -> MachineState:
        if self._error is not None:
            return MachineState.FAILED
        if self._output is not None:
            return MachineState.COMPLETED
        if self._program is not None:
            return MachineState.LOADED
        return MachineState.UNINITIALIZED

    def load_program(self, instructions: Iterable[Instruction]) -> None:
        if self._program is not None:
            raise make_state_error('program_overwritten')
        self._program = tuple(instructions)
        logger.debug("loaded %d instructions", len(self._program))
        if not is_linked(self._program):
            logger.debug("program has unlinked loop brackets")

    def load_input(self, queue: Iterable[int]) -> None:
        if self._queue is not None or self.state in (MachineState.COMPLETED, MachineState.FAILED):
            raise make_state_error('input_overwritten')
        self._queue = bytearray(queue)
        logger.debug("loaded input queue of %d bytes", len(self._queue))

    def load(self, instructions: Iterable[Instruction], queue: Optional[Iterable[int]] = None) -> None:
        if queue is not None:
            self.load_input(queue)
        self.load_program(instructions)

    def execute(self, instructions: Iterable[Instruction], queue: Optional[Iterable[int]] = None) -> None:
        """Load and run in one call."""
        self.load(instructions, queue)
        self.run()

    def run(self) -> None:
        if self._output is not None:
            return
        if self._error is not None:
            raise self._error
        if self._program is None:
            raise make_state_error('program_not_loaded')

        try:
            output = self._dispatch(self._program)
        except BFVMError as e:
            self._error = e
            logger.debug("run failed: %s", type(e).__name__)
            raise
        self._set_output(output)

    def _set_output(self, output: bytes) -> None:
        if self._output is not None:
            raise make_state_error('output_overwritten')
        self._output = output
        logger.debug("run completed with %d output bytes", len(output))

    # ===== Results =====

    @property
    def output(self) -> bytes:
        if self._output is None:
            raise make_state_error('output_unavailable')
        return self._output

    @property
    def output_text(self) -> str:
        return self.output.decode('utf-8', errors='replace')

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def memory(self) -> bytes:
        return self._memory.tobytes()

    # ===== Dispatch =====

    def _read_input(self, position: int) -> int:
        if self._queue is None:
            raise make_missing_arguments_error(position=position)
        if self._exhausted or not self._queue:
            self._exhausted = True
            return EOF_VALUE
        return self._queue.pop()

    def _dispatch(self, program: Sequence[Instruction]) -> bytes:
        ops, arg_a, arg_b, arg_c = encode(program)
        memory = self._memory
        output = bytearray()
        pc, pointer = 0, 0

        while True:
            pc, pointer, stop_reason, detail = run_until_stop(
                ops, arg_a, arg_b, arg_c, memory, pc, pointer)
            self._pointer = pointer

            if stop_reason == STOP_END:
                return bytes(output)

            position = program[pc].position
            if stop_reason == STOP_OUTPUT:
                output.append(int(memory[pointer]))
            elif stop_reason == STOP_INPUT:
                memory[pointer] = self._read_input(position)
            elif stop_reason == STOP_UNLINKED:
                raise make_unconnected_loops_error(position=position)
            elif stop_reason == STOP_MEMORY_FULL:
                raise make_infinite_loop_memory_full_error(position=position)
            elif stop_reason == STOP_MOVEMENT:
                raise make_infinite_loop_movement_error(position=position, step=int(detail))
            elif stop_reason == STOP_INFINITE:
                raise make_infinite_loop_found_error(position=position, value=int(detail), pointer=pointer)
            else:
                raise RuntimeError(f"Unknown stop reason {stop_reason}")
            pc += 1
