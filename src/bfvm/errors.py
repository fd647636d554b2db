from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


def _build_context(source: str, position: int, *, context: int = 20) -> str:
    """Excerpt of `source` around the 1-based `position` with a caret under it."""
    if not source:
        return ""
    idx = min(max(1, position), len(source)) - 1
    start = max(0, idx - context)
    end = min(len(source), idx + context + 1)

    excerpt = "".join(ch if ch.isprintable() else "?" for ch in source[start:end])
    lead = "... " if start > 0 else ""
    tail = " ..." if end < len(source) else ""
    caret = " " * (len(lead) + idx - start) + "^"
    return f"  {lead}{excerpt}{tail}\n  {caret}"


def _hint_for(kind: str) -> Optional[str]:
    if kind == 'unknown':
        return 'Only the eight characters +-<>,.[] are allowed. Whitespace and comments are not.'
    if kind == 'open':
        return 'Check for a missing "]" after this "[".'
    if kind == 'closed':
        return 'Check for an extra "]" or a missing "[" before it.'
    return None


@dataclass
class BFVMError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


# ---------------- Compile-time structural errors ----------------

@dataclass
class CompileError(BFVMError):
    position: int
    context: str


@dataclass
class UnknownInstructionError(CompileError):
    char: str


@dataclass
class MalformedOpenLoopError(CompileError):
    pass


@dataclass
class MalformedClosedLoopError(CompileError):
    pass


def _compile_message(label: str, text: str, source: str, position: int, kind: str) -> tuple:
    ctx = _build_context(source, position)
    hint = _hint_for(kind)
    ctx_block = f"\n{ctx}" if ctx else ""
    hint_block = f"\nHint: {hint}" if hint else ""
    return f"{label}: {text} (position {position}){ctx_block}{hint_block}", ctx


def make_unknown_instruction_error(*, char: str, source: str, position: int) -> UnknownInstructionError:
    message, ctx = _compile_message(
        'CompileError', f"Character instruction unknown: {char!r}", source, position, 'unknown')
    return UnknownInstructionError(message=message, position=position, context=ctx, char=char)


def make_malformed_open_loop_error(*, source: str, position: int) -> MalformedOpenLoopError:
    message, ctx = _compile_message(
        'CompileError', "Open loop does not match a closed loop", source, position, 'open')
    return MalformedOpenLoopError(message=message, position=position, context=ctx)


def make_malformed_closed_loop_error(*, source: str, position: int) -> MalformedClosedLoopError:
    message, ctx = _compile_message(
        'CompileError', "Closed loop does not match an open loop", source, position, 'closed')
    return MalformedClosedLoopError(message=message, position=position, context=ctx)


# ---------------- Execution-time data errors ----------------

@dataclass
class ExecutionError(BFVMError):
    pass


@dataclass
class MissingArgumentsError(ExecutionError):
    position: int


@dataclass
class UnconnectedLoopsError(ExecutionError):
    position: int


def make_missing_arguments_error(*, position: int) -> MissingArgumentsError:
    return MissingArgumentsError(
        message=f"ExecutionError: Missing arguments, input requested at position {position}",
        position=position,
    )


def make_unconnected_loops_error(*, position: int) -> UnconnectedLoopsError:
    return UnconnectedLoopsError(
        message=f"ExecutionError: Unconnected loops, bracket at position {position} has no target",
        position=position,
    )


# ---------------- Execution-time safety violations ----------------

@dataclass
class InfiniteLoopError(BFVMError):
    position: int


@dataclass
class InfiniteLoopFoundError(InfiniteLoopError):
    value: int
    pointer: int


@dataclass
class InfiniteLoopMemoryFullError(InfiniteLoopError):
    pass


@dataclass
class InfiniteLoopMovementError(InfiniteLoopError):
    step: int


def make_infinite_loop_found_error(*, position: int, value: int, pointer: int) -> InfiniteLoopFoundError:
    return InfiniteLoopFoundError(
        message=(
            f"InfiniteLoop: An infinite loop has been found, at code position {position}, "
            f"with a current value {value} in memory cell {pointer}"
        ),
        position=position,
        value=value,
        pointer=pointer,
    )


def make_infinite_loop_memory_full_error(*, position: int) -> InfiniteLoopMemoryFullError:
    return InfiniteLoopMemoryFullError(
        message=(
            f"InfiniteLoop: Scan at code position {position} can never stop, "
            f"every memory cell is non-zero"
        ),
        position=position,
    )


def make_infinite_loop_movement_error(*, position: int, step: int) -> InfiniteLoopMovementError:
    return InfiniteLoopMovementError(
        message=(
            f"InfiniteLoop: Scan at code position {position} wrapped around the tape "
            f"with step {step:+d} without finding a zero cell"
        ),
        position=position,
        step=step,
    )


# ---------------- API misuse ----------------

@dataclass
class MachineStateError(BFVMError):
    pass


@dataclass
class ProgramOverwrittenError(MachineStateError):
    pass


@dataclass
class InputOverwrittenError(MachineStateError):
    pass


@dataclass
class ProgramNotLoadedError(MachineStateError):
    pass


@dataclass
class OutputUnavailableError(MachineStateError):
    pass


@dataclass
class OutputOverwrittenError(MachineStateError):
    pass


def make_state_error(kind: str) -> MachineStateError:
    if kind == 'program_overwritten':
        return ProgramOverwrittenError("Execution Error: Instructions cannot be overwritten")
    if kind == 'input_overwritten':
        return InputOverwrittenError("Execution Error: Input cannot be overwritten")
    if kind == 'program_not_loaded':
        return ProgramNotLoadedError("Execution Error: Instructions not loaded")
    if kind == 'output_unavailable':
        return OutputUnavailableError("Execution Error: No code was executed")
    if kind == 'output_overwritten':
        return OutputOverwrittenError("Unexpected Error: Modifying output value")
    raise ValueError(f"Unknown state error kind: {kind}")


# ---------------- Boundary (argument decoding) ----------------

@dataclass
class ArgumentError(BFVMError):
    pass


@dataclass
class UsageError(ArgumentError):
    pass


@dataclass
class ArgumentParseError(ArgumentError):
    argument: str
    reason: str


def make_argument_parse_error(*, argument: str, reason: str) -> ArgumentParseError:
    return ArgumentParseError(
        message=f"Cannot parse argument `{argument}`: {reason}",
        argument=argument,
        reason=reason,
    )
