"""Encoded program representation and the JIT dispatch loop.

The linked instruction stream is flattened into parallel int64 arrays so the
hot loop can run under numba. The loop hands control back to Python for
anything that touches the outside world (input, output) or needs an error
built, using a stop-reason code:

    0  end of program
    1  Output at pc
    2  Input at pc
    3  loop bracket at pc has no target, or one outside the program
    4  scan at pc went all the way round a tape with no zero cell
    5  scan at pc wrapped back to its start (detail = step)
    6  drain/transfer at pc can never reach zero (detail = starting value)
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
from numba import njit

from .ir import (
    Add, AddUntilZero, ClearCell, Input, Instruction, LoopClose, LoopOpen,
    Move, Output, ScanLeft, ScanRight, TAPE_SIZE, TransferMultiply,
)

OP_ADD = 0
OP_MOVE = 1
OP_INPUT = 2
OP_OUTPUT = 3
OP_OPEN = 4
OP_CLOSE = 5
OP_CLEAR = 6
OP_SCAN_LEFT = 7
OP_SCAN_RIGHT = 8
OP_DRAIN = 9
OP_TRANSFER = 10

STOP_END = 0
STOP_OUTPUT = 1
STOP_INPUT = 2
STOP_UNLINKED = 3
STOP_MEMORY_FULL = 4
STOP_MOVEMENT = 5
STOP_INFINITE = 6

NO_TARGET = -1

EncodedProgram = Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]


def _jump_target(instructions: Sequence[Instruction], target: Optional[int], partner: type) -> int:
    """Encoded target, or NO_TARGET when it is missing or does not land on a partner bracket."""
    if target is None or not 0 <= target < len(instructions):
        return NO_TARGET
    if not isinstance(instructions[target], partner):
        return NO_TARGET
    return target


def encode(instructions: Sequence[Instruction]) -> EncodedProgram:
    """Flatten instructions into (ops, arg_a, arg_b, arg_c) int64 arrays."""
    n = len(instructions)
    ops = np.zeros(n, dtype=np.int64)
    arg_a = np.zeros(n, dtype=np.int64)
    arg_b = np.zeros(n, dtype=np.int64)
    arg_c = np.zeros(n, dtype=np.int64)

    for i, instr in enumerate(instructions):
        if isinstance(instr, Add):
            ops[i], arg_a[i] = OP_ADD, instr.delta
        elif isinstance(instr, Move):
            ops[i], arg_a[i] = OP_MOVE, instr.offset
        elif isinstance(instr, Input):
            ops[i] = OP_INPUT
        elif isinstance(instr, Output):
            ops[i] = OP_OUTPUT
        elif isinstance(instr, LoopOpen):
            ops[i], arg_a[i] = OP_OPEN, _jump_target(instructions, instr.target, LoopClose)
        elif isinstance(instr, LoopClose):
            ops[i], arg_a[i] = OP_CLOSE, _jump_target(instructions, instr.target, LoopOpen)
        elif isinstance(instr, ClearCell):
            ops[i] = OP_CLEAR
        elif isinstance(instr, ScanLeft):
            ops[i] = OP_SCAN_LEFT
        elif isinstance(instr, ScanRight):
            ops[i] = OP_SCAN_RIGHT
        elif isinstance(instr, AddUntilZero):
            ops[i], arg_a[i] = OP_DRAIN, instr.step
        elif isinstance(instr, TransferMultiply):
            ops[i] = OP_TRANSFER
            arg_a[i], arg_b[i], arg_c[i] = instr.offset, instr.source_delta, instr.dest_delta
        else:
            raise TypeError(f"Unexpected instruction: {instr!r}")

    return ops, arg_a, arg_b, arg_c


def new_tape() -> np.ndarray:
    return np.zeros(TAPE_SIZE, dtype=np.uint8)


@njit(cache=True)
def tape_has_zero(memory):
    for i in range(len(memory)):
        if memory[i] == 0:
            return True
    return False


@njit(cache=True)
def drain_count(value, step):
    """Iterations of `cell += step` taking `value` to zero, or -1 if it cycles first."""
    count = 0
    current = value
    while True:
        current = (current + step) & 255
        count += 1
        if current == 0:
            return count
        if current == value:
            return -1


@njit(cache=True)
def scan(memory, pointer, step, mem_mask):
    """Move by `step` until a zero cell; returns (pointer, found)."""
    start = pointer
    while True:
        pointer = (pointer + step) & mem_mask
        if memory[pointer] == 0:
            return pointer, True
        if pointer == start:
            return start, False


@njit(cache=True)
def run_until_stop(ops, arg_a, arg_b, arg_c, memory, pc, pointer):
    """Execute from `pc` until a stop condition; returns (pc, pointer, stop_reason, detail)."""
    prog_len = len(ops)
    mem_mask = len(memory) - 1
    stop_reason = STOP_END
    detail = 0

    while pc < prog_len:
        op = ops[pc]

        if op == OP_ADD:
            memory[pointer] = (memory[pointer] + arg_a[pc]) & 255
        elif op == OP_MOVE:
            pointer = (pointer + arg_a[pc]) & mem_mask
        elif op == OP_OPEN:
            target = arg_a[pc]
            if target < 0:
                stop_reason = STOP_UNLINKED
                break
            if memory[pointer] == 0:
                pc = target
                continue
        elif op == OP_CLOSE:
            target = arg_a[pc]
            if target < 0:
                stop_reason = STOP_UNLINKED
                break
            if memory[pointer] != 0:
                pc = target
                continue
        elif op == OP_CLEAR:
            memory[pointer] = 0
        elif op == OP_SCAN_RIGHT or op == OP_SCAN_LEFT:
            if memory[pointer] != 0:
                step = 1 if op == OP_SCAN_RIGHT else -1
                pointer, found = scan(memory, pointer, step, mem_mask)
                if not found:
                    # a scan never writes, so the tape is as it was on entry
                    if not tape_has_zero(memory):
                        stop_reason = STOP_MEMORY_FULL
                    else:
                        stop_reason = STOP_MOVEMENT
                        detail = step
                    break
        elif op == OP_DRAIN:
            value = np.int64(memory[pointer])
            if value != 0:
                if drain_count(value, arg_a[pc]) < 0:
                    stop_reason = STOP_INFINITE
                    detail = value
                    break
                memory[pointer] = 0
        elif op == OP_TRANSFER:
            value = np.int64(memory[pointer])
            if value != 0:
                count = drain_count(value, arg_b[pc])
                if count < 0:
                    stop_reason = STOP_INFINITE
                    detail = value
                    break
                dest = (pointer + arg_a[pc]) & mem_mask
                memory[dest] = (memory[dest] + count * arg_c[pc]) & 255
                memory[pointer] = 0
        elif op == OP_OUTPUT:
            stop_reason = STOP_OUTPUT
            break
        elif op == OP_INPUT:
            stop_reason = STOP_INPUT
            break

        pc += 1

    return pc, pointer, stop_reason, detail
