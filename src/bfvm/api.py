from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from .compiler import Compiler
from .errors import make_argument_parse_error
from .ir import Instruction
from .vm import VirtualMachine

InputData = Union[bytes, bytearray, str, Sequence[int]]

_BYTE_RE = re.compile(r'^\+?[0-9]+$')


@dataclass(frozen=True)
class CompileOptions:
    optimize_level: Optional[int] = None


@dataclass(frozen=True)
class RunResult:
    output: bytes
    text: str
    instructions: int


def compile_string(source: str, *, options: Optional[CompileOptions] = None) -> Tuple[Instruction, ...]:
    opt_level = None if options is None else options.optimize_level
    return Compiler(optimize_level=opt_level).compile(source)


def compile_file(path: str | Path, *, options: Optional[CompileOptions] = None, encoding: str = "utf-8") -> Tuple[Instruction, ...]:
    p = Path(path)
    return compile_string(p.read_text(encoding=encoding), options=options)


def to_bytes(data: InputData) -> bytes:
    if isinstance(data, str):
        return data.encode('utf-8')
    return bytes(data)


def run_string(source: str, input_data: Optional[InputData] = None, *, options: Optional[CompileOptions] = None) -> RunResult:
    """Compile and execute `source`.

    `input_data` is given in reading order (first byte is read first). None
    means no input was supplied at all, which makes any `,` an error.
    """
    program = compile_string(source, options=options)
    queue = None if input_data is None else to_bytes(input_data)[::-1]

    vm = VirtualMachine()
    vm.execute(program, queue)
    return RunResult(output=vm.output, text=vm.output_text, instructions=len(program))


def parse_byte(argument: str) -> int:
    if not _BYTE_RE.match(argument):
        raise make_argument_parse_error(argument=argument, reason="invalid digit found in string")
    value = int(argument)
    if value > 255:
        raise make_argument_parse_error(argument=argument, reason="number too large to fit in target type")
    return value


def decode_arguments(args: Sequence[str]) -> Optional[bytes]:
    """Program input from command-line arguments, in reading order.

    No arguments: no input. One argument: its UTF-8 bytes. More than one:
    each argument is a decimal byte value.
    """
    if not args:
        return None
    if len(args) == 1:
        return args[0].encode('utf-8')
    return bytes(parse_byte(a) for a in args)
